"""Typed tool inputs, one model per agent tool.

``classify_tool_input()`` turns the raw ``(tool_name, tool_input)`` pair
from a hook payload into one variant of ``ToolInput``. Names matching
``mcp__<server>__<tool>`` become ``McpToolInput``; any other name we don't
model becomes ``UnknownToolInput`` so new agent tools never break the hook.

Tool inputs are external data. Each model is a projection with the fields
rules and logging read, and unknown fields are ignored.
"""

from __future__ import annotations

__all__ = [
    'INTERNAL_TOOLS',
    'KNOWN_TOOL_INPUTS',
    'READ_ONLY_TOOLS',
    'BashInput',
    'BashOutputInput',
    'EditInput',
    'ExitPlanModeInput',
    'GlobInput',
    'GrepInput',
    'KillBashInput',
    'LSInput',
    'McpToolInput',
    'MultiEditInput',
    'NotebookEditInput',
    'NotebookReadInput',
    'ReadInput',
    'ToolInput',
    'UnknownToolInput',
    'WebFetchInput',
    'WebSearchInput',
    'WriteInput',
    'classify_tool_input',
    'is_exempt_tool',
    'is_mcp_tool',
]

import re
from collections.abc import Mapping
from typing import Any

import pydantic

# Tools that only read: the main rule phase never runs for them.
READ_ONLY_TOOLS = frozenset({'Grep', 'LS', 'WebFetch', 'Glob', 'NotebookRead', 'WebSearch', 'BashOutput'})

# Agent bookkeeping tools that never touch the workspace.
INTERNAL_TOOLS = frozenset(
    {'TodoWrite', 'Task', 'AskUserQuestion', 'TaskCreate', 'TaskUpdate', 'TaskList', 'TaskGet'}
)

_MCP_TOOL_RE = re.compile(r'^mcp__(?P<server>.*?)__(?P<tool>.*)$')


class _ExternalModel(pydantic.BaseModel):
    """Base for tool inputs we don't control. Ignores unknown fields."""

    model_config = pydantic.ConfigDict(extra='ignore', frozen=True, populate_by_name=True)


# --- Tool input models ---


class BashInput(_ExternalModel):
    command: str
    description: str | None = None
    timeout: float | None = None
    run_in_background: bool | None = None


class EditInput(_ExternalModel):
    file_path: str
    old_string: str
    new_string: str
    replace_all: bool | None = None


class MultiEditOperation(_ExternalModel):
    old_string: str
    new_string: str
    replace_all: bool | None = None


class MultiEditInput(_ExternalModel):
    file_path: str
    edits: tuple[MultiEditOperation, ...]


class WriteInput(_ExternalModel):
    file_path: str
    content: str


class ReadInput(_ExternalModel):
    file_path: str
    offset: int | None = None
    limit: int | None = None


class GrepInput(_ExternalModel):
    pattern: str
    path: str | None = None
    glob: str | None = None
    output_mode: str | None = None
    type: str | None = None
    case_insensitive: bool | None = pydantic.Field(default=None, alias='-i')
    line_numbers: bool | None = pydantic.Field(default=None, alias='-n')
    after_context: int | None = pydantic.Field(default=None, alias='-A')
    before_context: int | None = pydantic.Field(default=None, alias='-B')
    context: int | None = pydantic.Field(default=None, alias='-C')
    head_limit: int | None = None
    multiline: bool | None = None


class GlobInput(_ExternalModel):
    pattern: str
    path: str | None = None


class LSInput(_ExternalModel):
    path: str
    ignore: tuple[str, ...] | None = None


class WebFetchInput(_ExternalModel):
    url: str
    prompt: str = ''


class WebSearchInput(_ExternalModel):
    query: str
    allowed_domains: tuple[str, ...] | None = None
    blocked_domains: tuple[str, ...] | None = None


class NotebookReadInput(_ExternalModel):
    notebook_path: str
    cell_id: str | None = None


class NotebookEditInput(_ExternalModel):
    notebook_path: str
    new_source: str
    cell_id: str | None = None
    cell_type: str | None = None
    edit_mode: str | None = None


class ExitPlanModeInput(_ExternalModel):
    plan: str = ''


class BashOutputInput(_ExternalModel):
    bash_id: str
    filter: str | None = None


class KillBashInput(_ExternalModel):
    shell_id: str


class McpToolInput(_ExternalModel):
    server: str
    tool: str
    arguments: dict[str, Any]


class UnknownToolInput(_ExternalModel):
    tool_name: str
    arguments: dict[str, Any]


type ToolInput = (
    BashInput
    | EditInput
    | MultiEditInput
    | WriteInput
    | ReadInput
    | GrepInput
    | GlobInput
    | LSInput
    | WebFetchInput
    | WebSearchInput
    | NotebookReadInput
    | NotebookEditInput
    | ExitPlanModeInput
    | BashOutputInput
    | KillBashInput
    | McpToolInput
    | UnknownToolInput
)

KNOWN_TOOL_INPUTS: Mapping[str, type[_ExternalModel]] = {
    'Bash': BashInput,
    'Edit': EditInput,
    'MultiEdit': MultiEditInput,
    'Write': WriteInput,
    'Read': ReadInput,
    'Grep': GrepInput,
    'Glob': GlobInput,
    'LS': LSInput,
    'WebFetch': WebFetchInput,
    'WebSearch': WebSearchInput,
    'NotebookRead': NotebookReadInput,
    'NotebookEdit': NotebookEditInput,
    'ExitPlanMode': ExitPlanModeInput,
    'BashOutput': BashOutputInput,
    'KillBash': KillBashInput,
}


# --- Classification ---


def classify_tool_input(tool_name: str, tool_input: Mapping[str, Any]) -> ToolInput:
    """Validate ``tool_input`` against the model for ``tool_name``.

    Raises:
        pydantic.ValidationError: A known tool's input is malformed.
    """
    model = KNOWN_TOOL_INPUTS.get(tool_name)
    if model is not None:
        return model.model_validate(tool_input)  # type: ignore[return-value]
    if match := _MCP_TOOL_RE.match(tool_name):
        return McpToolInput(server=match['server'], tool=match['tool'], arguments=dict(tool_input))
    return UnknownToolInput(tool_name=tool_name, arguments=dict(tool_input))


def is_mcp_tool(tool_name: str) -> bool:
    return _MCP_TOOL_RE.match(tool_name) is not None


def is_exempt_tool(tool_name: str) -> bool:
    """Read-only, internal and MCP tools skip the main rule phase."""
    return tool_name in READ_ONLY_TOOLS or tool_name in INTERNAL_TOOLS or is_mcp_tool(tool_name)
