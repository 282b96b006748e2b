"""Tool-use and prompt logging.

Hook scripts call ``configure_logging()`` once at startup. It attaches a file
handler to the ``policy_lib`` logger, so every module logger in the package
writes to the same file. stderr stays reserved for denial messages.
"""

from __future__ import annotations

__all__ = [
    'LOG_FORMAT',
    'PROMPT_PREVIEW_LENGTH',
    'configure_logging',
    'format_transcript_info',
    'log_prompt',
    'log_tool_use',
    'loggable_input',
]

import json
import logging
import os
from pathlib import Path
from typing import Any, assert_never

from policy_lib import paths
from policy_lib.invocation import ToolInvocation
from policy_lib.schemas.tools import (
    BashInput,
    BashOutputInput,
    EditInput,
    ExitPlanModeInput,
    GlobInput,
    GrepInput,
    KillBashInput,
    LSInput,
    McpToolInput,
    MultiEditInput,
    NotebookEditInput,
    NotebookReadInput,
    ReadInput,
    ToolInput,
    UnknownToolInput,
    WebFetchInput,
    WebSearchInput,
    WriteInput,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
PROMPT_PREVIEW_LENGTH = 200


def configure_logging(path: Path | None = None) -> None:
    """Send package logs to the hook log file.

    ``CLAUDE_POLICY_LOG_LEVEL`` (e.g. ``DEBUG``) raises verbosity to include
    per-rule verdicts. Calling twice with the same path is a no-op. If the
    log file cannot be opened, a warning is emitted and no file handler is
    added; the hooks keep evaluating without a log.
    """
    path = path or paths.log_path()
    package_logger = logging.getLogger('policy_lib')
    package_logger.setLevel(os.environ.get('CLAUDE_POLICY_LOG_LEVEL', 'INFO').upper())

    for handler in package_logger.handlers:
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == path.absolute():
            return

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding='utf-8')
    except OSError as exc:
        logger.warning('Hook log disabled, cannot open %s: %s', path, exc)
        return
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)


def loggable_input(tool: ToolInput) -> dict[str, Any]:
    """Tool input with bulky content fields dropped."""
    match tool:
        case EditInput():
            return tool.model_dump(exclude={'old_string', 'new_string'}, exclude_none=True)
        case MultiEditInput():
            return tool.model_dump(exclude={'edits'}, exclude_none=True)
        case WriteInput():
            return tool.model_dump(exclude={'content'}, exclude_none=True)
        case NotebookEditInput():
            return tool.model_dump(exclude={'new_source'}, exclude_none=True)
        case McpToolInput() | UnknownToolInput():
            return dict(tool.arguments)
        case (
            BashInput()
            | ReadInput()
            | GrepInput()
            | GlobInput()
            | LSInput()
            | WebFetchInput()
            | WebSearchInput()
            | NotebookReadInput()
            | ExitPlanModeInput()
            | BashOutputInput()
            | KillBashInput()
        ):
            return tool.model_dump(by_alias=True, exclude_none=True)
        case _:
            assert_never(tool)


def format_transcript_info(session_id: str, transcript_path: str) -> str:
    """``, Transcript: <path>`` unless the path already names the session."""
    if not transcript_path or (session_id and session_id in transcript_path):
        return ''
    return f', Transcript: {transcript_path}'


def log_tool_use(invocation: ToolInvocation) -> str:
    """Log one tool invocation and return the logged line."""
    tool_input = json.dumps(loggable_input(invocation.tool), ensure_ascii=False)
    transcript = format_transcript_info(invocation.session_id, invocation.transcript_path)
    message = f'Session: {invocation.session_id}{transcript}, Tool: {invocation.tool_name}, Input: {tool_input}'
    logger.info(message)
    return message


def log_prompt(session_id: str, transcript_path: str, prompt: str, cwd: str) -> str:
    """Log a submitted prompt, truncated, and return the logged line."""
    preview = prompt if len(prompt) <= PROMPT_PREVIEW_LENGTH else prompt[:PROMPT_PREVIEW_LENGTH] + '...'
    transcript = format_transcript_info(session_id, transcript_path)
    message = f'Session: {session_id}{transcript}, CWD: {cwd}, Prompt: {json.dumps(preview, ensure_ascii=False)}'
    logger.info(message)
    return message
