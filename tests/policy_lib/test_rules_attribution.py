"""Tests for the co-authorship proof rule and proof store."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest
from policy_lib import paths
from policy_lib.proofs import proof_exists, proof_pin, submit_proof
from policy_lib.rules import PASS, RuleContext, Violation
from policy_lib.rules.attribution import require_co_authorship_proof

type MakeContext = Callable[..., RuleContext]

TRAILER = 'Co-authored-by: Claude <noreply@anthropic.com>'


def _commit(*lines: str) -> str:
    message = '\n'.join(lines)
    return f'git commit -m "{message}"'


class TestRequireProof:
    def test_missing_marker_denied(self, bash_context: MakeContext) -> None:
        result = require_co_authorship_proof(bash_context(_commit('Fix parser', '', TRAILER)))
        assert isinstance(result, Violation)
        assert result.messages[0] == '⚠️  This commit includes co-authorship. Claude Code must:'
        assert any('submit-co-authorship-proof.py' in message for message in result.messages)

    def test_unknown_pin_denied(self, bash_context: MakeContext) -> None:
        pin = 'a' * 64
        command = _commit('Fix parser', '', TRAILER, f'x-claude-code-co-authorship-proof: {pin}')
        result = require_co_authorship_proof(bash_context(command))
        assert isinstance(result, Violation)
        assert result.messages[0] == f'❌ Invalid co-authorship proof PIN: {pin}'

    def test_submitted_pin_allowed(self, bash_context: MakeContext) -> None:
        pin = submit_proof('Claude Code wrote the tokenizer').pin
        command = _commit('Fix parser', '', TRAILER, f'X-Claude-Code-Co-Authorship-Proof: {pin.upper()}')
        assert require_co_authorship_proof(bash_context(command)) == PASS

    @pytest.mark.parametrize(
        'command',
        ['git commit -m "Fix parser"', f'echo "{TRAILER}"', 'git log --grep co-authored-by'],
        ids=['no-trailer', 'not-a-commit', 'log'],
    )
    def test_allowed(self, bash_context: MakeContext, command: str) -> None:
        assert require_co_authorship_proof(bash_context(command)) == PASS


class TestProofStore:
    def test_pin_is_sha256(self) -> None:
        assert proof_pin('abc') == 'ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad'

    def test_submit_writes_record(self, isolated_dirs: Path) -> None:
        now = datetime(2025, 3, 4, 5, 6, 7, tzinfo=UTC)
        record = submit_proof('wrote tests', now=now)
        path = isolated_dirs / 'data' / 'claude-policy' / 'co-authorship-proofs' / f'{record.pin}.json'
        assert json.loads(path.read_text()) == {
            'pin': proof_pin('wrote tests'),
            'proof': 'wrote tests',
            'timestamp': '2025-03-04T05:06:07+00:00',
        }

    def test_failed_write_leaves_no_temp_file(self, isolated_dirs: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def _partial_write(self: Path, data: str, encoding: str | None = None) -> int:
            with open(self, 'w', encoding=encoding) as handle:
                handle.write(data[:10])
            raise OSError(28, 'No space left on device')

        monkeypatch.setattr(Path, 'write_text', _partial_write)
        with pytest.raises(OSError, match='No space left'):
            submit_proof('wrote the lexer')

        proofs_dir = isolated_dirs / 'data' / 'claude-policy' / 'co-authorship-proofs'
        assert list(proofs_dir.glob('*.tmp')) == []
        assert list(proofs_dir.glob('*.json')) == []

    def test_exists(self) -> None:
        pin = submit_proof('wrote docs').pin
        assert proof_exists(pin)
        assert not proof_exists(proof_pin('something else'))

    @pytest.mark.parametrize('pin', ['', 'abc', '../' + 'a' * 61, 'A' * 64])
    def test_malformed_pin_never_exists(self, pin: str) -> None:
        assert proof_exists(pin) is False

    def test_proof_path_rejects_traversal(self) -> None:
        with pytest.raises(ValueError, match='Invalid co-authorship proof PIN'):
            paths.proof_path('../../etc/passwd')
