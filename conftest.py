"""Test isolation for the policy hooks.

Every test gets its own XDG config, data and state directories, so config
files, proof records and hook logs never touch the real home directory or
leak between tests.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from policy_lib.invocation import ToolInvocation
from policy_lib.rules import RuleContext


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every policy path at a per-test directory."""
    root = tmp_path / 'xdg'
    monkeypatch.setenv('XDG_CONFIG_HOME', str(root / 'config'))
    monkeypatch.setenv('XDG_DATA_HOME', str(root / 'data'))
    monkeypatch.setenv('XDG_STATE_HOME', str(root / 'state'))
    monkeypatch.delenv('CLAUDE_POLICY_CONFIG', raising=False)
    monkeypatch.delenv('CLAUDE_POLICY_LOG_FILE', raising=False)
    monkeypatch.delenv('CLAUDE_POLICY_LOG_LEVEL', raising=False)
    return root


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Drop file handlers installed by ``configure_logging()`` during a test."""
    package_logger = logging.getLogger('policy_lib')
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield
    for handler in package_logger.handlers:
        if handler not in handlers:
            package_logger.removeHandler(handler)
            handler.close()
    package_logger.setLevel(level)


@pytest.fixture
def make_context(tmp_path: Path) -> Callable[..., RuleContext]:
    """Build a RuleContext for a tool call. ``cwd`` defaults to a per-test project dir."""
    project = tmp_path / 'project'
    project.mkdir(exist_ok=True)

    def _make(tool_name: str, tool_input: dict[str, Any], *, cwd: str | None = None, **kwargs: Any) -> RuleContext:
        invocation = ToolInvocation.create(
            tool_name,
            tool_input,
            session_id='test-session',
            cwd=str(project) if cwd is None else cwd,
        )
        return RuleContext(invocation, **kwargs)

    return _make


@pytest.fixture
def bash_context(make_context: Callable[..., RuleContext]) -> Callable[..., RuleContext]:
    """Build a RuleContext for a Bash command."""

    def _make(command: str, **kwargs: Any) -> RuleContext:
        return make_context('Bash', {'command': command}, **kwargs)

    return _make
