"""One tool call, as the policy sees it."""

from __future__ import annotations

__all__ = ['ToolInvocation']

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from policy_lib.schemas.hooks import PreToolUseHookInput
from policy_lib.schemas.tools import ToolInput, classify_tool_input


@dataclass(frozen=True, slots=True)
class ToolInvocation:
    tool_name: str
    tool: ToolInput
    session_id: str = ''
    transcript_path: str = ''
    cwd: str = ''

    @classmethod
    def from_hook_input(cls, hook_input: PreToolUseHookInput) -> ToolInvocation:
        return cls.create(
            hook_input.tool_name,
            hook_input.tool_input,
            session_id=hook_input.session_id,
            transcript_path=hook_input.transcript_path,
            cwd=hook_input.cwd,
        )

    @classmethod
    def create(
        cls,
        tool_name: str,
        tool_input: Mapping[str, Any],
        *,
        session_id: str = '',
        transcript_path: str = '',
        cwd: str = '',
    ) -> ToolInvocation:
        """Classify a raw tool input.

        Raises:
            pydantic.ValidationError: A known tool's input is malformed.
        """
        return cls(
            tool_name=tool_name,
            tool=classify_tool_input(tool_name, tool_input),
            session_id=session_id,
            transcript_path=transcript_path,
            cwd=cwd,
        )
