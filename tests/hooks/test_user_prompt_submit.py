"""Tests for the user-prompt-submit hook: prompt logging that never blocks."""

from __future__ import annotations

import importlib.util
import io
import json
import sys
from collections.abc import Generator
from pathlib import Path
from types import ModuleType
from typing import Any

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture(scope='session')
def hook_module() -> Generator[ModuleType]:
    """Import user-prompt-submit.py (hyphenated filename requires importlib)."""
    path = REPO_ROOT / 'hooks' / 'user-prompt-submit.py'
    spec = importlib.util.spec_from_file_location('user_prompt_submit', path)
    assert spec is not None and spec.loader is not None
    mod = importlib.util.module_from_spec(spec)
    sys.modules['user_prompt_submit'] = mod
    spec.loader.exec_module(mod)
    yield mod
    sys.modules.pop('user_prompt_submit', None)


def _payload(prompt: str, **overrides: Any) -> str:
    return json.dumps(
        {
            'session_id': 'test-session',
            'transcript_path': '/tmp/transcripts/test-session.jsonl',
            'cwd': '/work/project',
            'hook_event_name': 'UserPromptSubmit',
            'prompt': prompt,
            **overrides,
        }
    )


def _run(hook_module: ModuleType, monkeypatch: pytest.MonkeyPatch, payload: str) -> int:
    monkeypatch.setattr('sys.stdin', io.StringIO(payload))
    try:
        hook_module.main()
    except SystemExit as exc:
        return int(exc.code or 0)
    return 0


def _log_text(isolated_dirs: Path) -> str:
    path = isolated_dirs / 'state' / 'claude-policy' / 'hooks.log'
    return path.read_text() if path.exists() else ''


# ---------------------------------------------------------------------------
# TestPromptLogging
# ---------------------------------------------------------------------------


class TestPromptLogging:
    def test_prompt_logged_with_cwd(
        self,
        hook_module: ModuleType,
        monkeypatch: pytest.MonkeyPatch,
        isolated_dirs: Path,
    ) -> None:
        assert _run(hook_module, monkeypatch, _payload('fix the failing test')) == 0
        log = _log_text(isolated_dirs)
        assert 'Session: test-session, CWD: /work/project, Prompt: "fix the failing test"' in log

    def test_long_prompt_truncated(
        self,
        hook_module: ModuleType,
        monkeypatch: pytest.MonkeyPatch,
        isolated_dirs: Path,
    ) -> None:
        _run(hook_module, monkeypatch, _payload('x' * 500))
        log = _log_text(isolated_dirs)
        assert '"' + 'x' * 200 + '..."' in log
        assert 'x' * 201 not in log

    def test_disabled_by_config(
        self,
        hook_module: ModuleType,
        monkeypatch: pytest.MonkeyPatch,
        isolated_dirs: Path,
    ) -> None:
        config = isolated_dirs / 'config' / 'claude-policy' / 'config.json'
        config.parent.mkdir(parents=True)
        config.write_text(json.dumps({'hooks': {'logPrompts': False}}))
        assert _run(hook_module, monkeypatch, _payload('do not log me')) == 0
        assert 'do not log me' not in _log_text(isolated_dirs)


# ---------------------------------------------------------------------------
# TestNeverBlocks: every failure exits 0
# ---------------------------------------------------------------------------


class TestNeverBlocks:
    @pytest.mark.parametrize(
        'payload',
        ['not json', '{}', json.dumps({'prompt': 42})],
        ids=['invalid-json', 'missing-prompt', 'wrong-type'],
    )
    def test_malformed_payload_exits_0(
        self,
        hook_module: ModuleType,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        payload: str,
    ) -> None:
        assert _run(hook_module, monkeypatch, payload) == 0
        assert 'user-prompt-submit hook error' in capsys.readouterr().err

    def test_wrapped_main_raises_on_malformed_payload(
        self,
        hook_module: ModuleType,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr('sys.stdin', io.StringIO('{}'))
        with pytest.raises(Exception, match='prompt'):
            hook_module.main.__wrapped__()
