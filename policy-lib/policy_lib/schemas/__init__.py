"""Pydantic schemas for hook payloads and tool inputs."""

from __future__ import annotations

from policy_lib.schemas.hooks import HookInput, PreToolUseHookInput, StrictModel, UserPromptSubmitHookInput
from policy_lib.schemas.tools import (
    INTERNAL_TOOLS,
    READ_ONLY_TOOLS,
    BashInput,
    ToolInput,
    classify_tool_input,
    is_exempt_tool,
)

__all__ = [
    'INTERNAL_TOOLS',
    'READ_ONLY_TOOLS',
    'BashInput',
    'HookInput',
    'PreToolUseHookInput',
    'StrictModel',
    'ToolInput',
    'UserPromptSubmitHookInput',
    'classify_tool_input',
    'is_exempt_tool',
]
