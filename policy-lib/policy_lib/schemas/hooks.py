"""Hook input schemas for PreToolUse and UserPromptSubmit.

Payloads arrive as JSON on stdin. ``tool_name`` and ``tool_input`` are the
only required PreToolUse fields; session metadata is optional and fields
we don't know about are ignored, since the agent adds fields across
releases.

See: https://code.claude.com/docs/en/hooks
"""

from __future__ import annotations

__all__ = [
    'HookInput',
    'PreToolUseHookInput',
    'StrictModel',
    'UserPromptSubmitHookInput',
]

import os
from typing import Any, Literal

import pydantic


class StrictModel(pydantic.BaseModel):
    """Base model with strict validation."""

    model_config = pydantic.ConfigDict(
        extra='forbid',  # Reject unknown fields (fail-fast)
        strict=True,  # Strict type coercion
        frozen=True,  # Immutable after creation
    )


class HookInput(pydantic.BaseModel):
    """Fields shared by every hook payload."""

    model_config = pydantic.ConfigDict(
        extra='ignore',
        strict=True,
        frozen=True,
    )

    session_id: str = ''
    transcript_path: str = ''
    cwd: str = pydantic.Field(default_factory=os.getcwd)
    hook_event_name: str | None = None
    permission_mode: str | None = None


# --- PreToolUse hook types ---


class PreToolUseHookInput(HookInput):
    """PreToolUse hook input schema.

    See: https://code.claude.com/docs/en/hooks#pretooluse
    """

    tool_name: str
    tool_input: dict[str, Any]
    tool_use_id: str | None = None


# --- UserPromptSubmit hook types ---


class UserPromptSubmitHookInput(HookInput):
    """UserPromptSubmit hook input schema.

    See: https://code.claude.com/docs/en/hooks#userpromptsubmit
    """

    hook_event_name: Literal['UserPromptSubmit'] | None = None
    prompt: str
