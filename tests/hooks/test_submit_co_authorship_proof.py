"""Tests for the co-authorship proof CLI."""

from __future__ import annotations

import importlib.util
import json
import sys
from collections.abc import Generator
from pathlib import Path
from types import ModuleType

import pytest
from policy_lib.proofs import proof_exists, proof_pin

REPO_ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture(scope='session')
def cli_module() -> Generator[ModuleType]:
    """Import submit-co-authorship-proof.py (hyphenated filename requires importlib)."""
    path = REPO_ROOT / 'hooks' / 'submit-co-authorship-proof.py'
    spec = importlib.util.spec_from_file_location('submit_co_authorship_proof', path)
    assert spec is not None and spec.loader is not None
    mod = importlib.util.module_from_spec(spec)
    sys.modules['submit_co_authorship_proof'] = mod
    spec.loader.exec_module(mod)
    yield mod
    sys.modules.pop('submit_co_authorship_proof', None)


class TestSubmitProof:
    def test_prints_pin_and_stores_record(
        self,
        cli_module: ModuleType,
        capsys: pytest.CaptureFixture[str],
        isolated_dirs: Path,
    ) -> None:
        proof = 'Claude Code wrote the retry loop in this session'
        cli_module.main([proof])

        pin = capsys.readouterr().out.strip()
        assert pin == proof_pin(proof)
        assert proof_exists(pin)

        path = isolated_dirs / 'data' / 'claude-policy' / 'co-authorship-proofs' / f'{pin}.json'
        record = json.loads(path.read_text())
        assert record['proof'] == proof
        assert record['pin'] == pin
        assert record['timestamp'].endswith('+00:00')

    @pytest.mark.parametrize('argv', [[], ['   ']], ids=['missing', 'blank'])
    def test_missing_proof_prints_usage_and_exits_1(
        self,
        cli_module: ModuleType,
        capsys: pytest.CaptureFixture[str],
        argv: list[str],
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli_module.main(argv)
        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert err.startswith('usage: submit-co-authorship-proof.py')
        assert 'non-empty proof' in err

    def test_unwritable_store_exits_1(
        self,
        cli_module: ModuleType,
        capsys: pytest.CaptureFixture[str],
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
    ) -> None:
        blocker = tmp_path / 'not-a-dir'
        blocker.write_text('')
        monkeypatch.setenv('XDG_DATA_HOME', str(blocker))
        with pytest.raises(SystemExit) as exc_info:
            cli_module.main(['some proof'])
        assert exc_info.value.code == 1
        assert 'Could not store the proof' in capsys.readouterr().err
