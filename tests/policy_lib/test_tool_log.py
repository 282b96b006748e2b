"""Tests for tool-use and prompt logging."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from policy_lib.invocation import ToolInvocation
from policy_lib.rules import PASS, RuleContext, SideEffect
from policy_lib.rules.tool_use_log import log_tool_use as log_tool_use_rule
from policy_lib.tool_log import (
    configure_logging,
    format_transcript_info,
    log_prompt,
    log_tool_use,
    loggable_input,
)

type MakeContext = Callable[..., RuleContext]


def _invocation(tool_name: str, tool_input: dict[str, Any], **kwargs: Any) -> ToolInvocation:
    return ToolInvocation.create(tool_name, tool_input, session_id='s1', **kwargs)


class TestLoggableInput:
    @pytest.mark.parametrize(
        'tool_name, tool_input, expected',
        [
            ('Bash', {'command': 'make', 'description': 'Build'}, {'command': 'make', 'description': 'Build'}),
            (
                'Edit',
                {'file_path': 'a.py', 'old_string': 'x', 'new_string': 'y'},
                {'file_path': 'a.py'},
            ),
            (
                'MultiEdit',
                {'file_path': 'a.py', 'edits': [{'old_string': 'x', 'new_string': 'y'}]},
                {'file_path': 'a.py'},
            ),
            ('Write', {'file_path': 'a.py', 'content': 'body'}, {'file_path': 'a.py'}),
            (
                'NotebookEdit',
                {'notebook_path': 'n.ipynb', 'new_source': 'print(1)', 'cell_id': 'c1'},
                {'notebook_path': 'n.ipynb', 'cell_id': 'c1'},
            ),
            ('Grep', {'pattern': 'x', '-i': True}, {'pattern': 'x', '-i': True}),
            ('mcp__browser__click', {'selector': '#go'}, {'selector': '#go'}),
            ('FutureTool', {'a': 1}, {'a': 1}),
        ],
        ids=['bash', 'edit', 'multi-edit', 'write', 'notebook-edit', 'grep-aliases', 'mcp', 'unknown'],
    )
    def test_fields(self, tool_name: str, tool_input: dict[str, Any], expected: dict[str, Any]) -> None:
        assert loggable_input(_invocation(tool_name, tool_input).tool) == expected


class TestFormatTranscriptInfo:
    @pytest.mark.parametrize(
        'session_id, transcript_path, expected',
        [
            ('s1', '', ''),
            ('s1', '/t/s1.jsonl', ''),
            ('s1', '/t/other.jsonl', ', Transcript: /t/other.jsonl'),
            ('', '/t/other.jsonl', ', Transcript: /t/other.jsonl'),
        ],
    )
    def test_info(self, session_id: str, transcript_path: str, expected: str) -> None:
        assert format_transcript_info(session_id, transcript_path) == expected


class TestLogLines:
    def test_tool_use_line(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger='policy_lib')
        message = log_tool_use(_invocation('Bash', {'command': 'make'}, transcript_path='/t/x.jsonl'))
        assert message == 'Session: s1, Transcript: /t/x.jsonl, Tool: Bash, Input: {"command": "make"}'
        assert caplog.messages == [message]

    def test_prompt_preview(self) -> None:
        message = log_prompt('s1', '', 'é' * 250, '/work')
        assert message == f'Session: s1, CWD: /work, Prompt: "{"é" * 200}..."'

    def test_short_prompt_not_truncated(self) -> None:
        assert log_prompt('s1', '', 'hi', '/work').endswith('Prompt: "hi"')


class TestConfigureLogging:
    def test_writes_to_file(self, tmp_path: Path) -> None:
        path = tmp_path / 'logs' / 'hooks.log'
        configure_logging(path)
        log_tool_use(_invocation('Bash', {'command': 'make'}))
        assert 'Tool: Bash' in path.read_text()

    def test_idempotent(self, tmp_path: Path) -> None:
        path = tmp_path / 'hooks.log'
        configure_logging(path)
        configure_logging(path)
        package_logger = logging.getLogger('policy_lib')
        handlers = [handler for handler in package_logger.handlers if isinstance(handler, logging.FileHandler)]
        assert len(handlers) == 1

    def test_level_from_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv('CLAUDE_POLICY_LOG_LEVEL', 'debug')
        configure_logging(tmp_path / 'hooks.log')
        assert logging.getLogger('policy_lib').level == logging.DEBUG

    def test_unwritable_location_adds_no_handler(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        blocker = tmp_path / 'blocker'
        blocker.write_text('not a directory')
        configure_logging(blocker / 'hooks.log')
        package_logger = logging.getLogger('policy_lib')
        assert not any(isinstance(handler, logging.FileHandler) for handler in package_logger.handlers)
        assert 'Hook log disabled' in caplog.text

    def test_default_location(self, isolated_dirs: Path) -> None:
        configure_logging()
        log_prompt('s1', '', 'hello', '/work')
        assert 'Prompt: "hello"' in (isolated_dirs / 'state' / 'claude-policy' / 'hooks.log').read_text()


class TestToolUseRule:
    def test_logs_workspace_tools(self, bash_context: MakeContext, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger='policy_lib')
        assert log_tool_use_rule(bash_context('make')) == SideEffect('logged tool use')
        assert any('Tool: Bash' in message for message in caplog.messages)

    @pytest.mark.parametrize(
        'tool_name, tool_input',
        [('Grep', {'pattern': 'x'}), ('TodoWrite', {'todos': []}), ('mcp__db__query', {'sql': 'select 1'})],
        ids=['read-only', 'internal', 'mcp'],
    )
    def test_exempt_tools_not_logged(
        self,
        make_context: MakeContext,
        caplog: pytest.LogCaptureFixture,
        tool_name: str,
        tool_input: dict[str, Any],
    ) -> None:
        caplog.set_level(logging.INFO, logger='policy_lib')
        assert log_tool_use_rule(make_context(tool_name, tool_input)) == PASS
        assert caplog.messages == []
