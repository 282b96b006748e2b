"""Tests for the package manager rules."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from policy_lib.rules import PASS, RuleContext, Violation
from policy_lib.rules.package_managers import (
    ban_cargo_manifest_path,
    ban_wrong_package_manager,
    ban_yarn_cwd,
    detect_package_manager,
)

type MakeContext = Callable[..., RuleContext]


class TestCargoManifestPath:
    def test_denied_with_cd_suggestion(self, bash_context: MakeContext) -> None:
        result = ban_cargo_manifest_path(bash_context('cargo build --manifest-path crates/core/Cargo.toml'))
        assert isinstance(result, Violation)
        assert result.messages[0] == '❌ cargo --manifest-path is not allowed'
        assert result.messages[-2:] == ('  Bash(cd crates/core)', '  Bash(cargo build)')

    def test_equals_form(self, bash_context: MakeContext) -> None:
        result = ban_cargo_manifest_path(bash_context('cargo test --manifest-path=../lib/Cargo.toml --all'))
        assert isinstance(result, Violation)
        assert result.messages[-2:] == ('  Bash(cd ../lib)', '  Bash(cargo test --all)')

    @pytest.mark.parametrize('command', ['cargo build', 'cargo run -- --manifest-path x'])
    def test_allowed(self, bash_context: MakeContext, command: str) -> None:
        assert ban_cargo_manifest_path(bash_context(command)) == PASS


class TestYarnCwd:
    def test_denied(self, bash_context: MakeContext) -> None:
        result = ban_yarn_cwd(bash_context('yarn --cwd packages/web test'))
        assert isinstance(result, Violation)
        assert result.messages[0] == '❌ yarn --cwd is not allowed'
        assert result.messages[-2:] == ('  Bash(cd packages/web)', '  Bash(yarn test)')

    def test_allowed(self, bash_context: MakeContext) -> None:
        assert ban_yarn_cwd(bash_context('yarn test')) == PASS


class TestWrongPackageManager:
    @pytest.mark.parametrize(
        'lockfiles, expected',
        [
            ((), None),
            (('package-lock.json',), 'npm'),
            (('yarn.lock',), 'yarn'),
            (('bun.lock',), 'bun'),
            (('pnpm-lock.yaml',), 'pnpm'),
            (('package-lock.json', 'yarn.lock'), 'yarn'),
        ],
        ids=['none', 'npm', 'yarn', 'bun', 'pnpm', 'yarn-first'],
    )
    def test_detect(self, tmp_path: Path, lockfiles: tuple[str, ...], expected: str | None) -> None:
        for lockfile in lockfiles:
            (tmp_path / lockfile).write_text('')
        assert detect_package_manager(str(tmp_path)) == expected

    def test_npm_in_yarn_project_denied(self, bash_context: MakeContext, tmp_path: Path) -> None:
        (tmp_path / 'project' / 'yarn.lock').write_text('')
        result = ban_wrong_package_manager(bash_context('npm install lodash'))
        assert isinstance(result, Violation)
        assert result.messages[0] == '❌ Wrong package manager: npm used in a yarn project'
        assert 'Use yarn instead' in result.messages[1]

    def test_npx_in_pnpm_project_denied(self, bash_context: MakeContext, tmp_path: Path) -> None:
        (tmp_path / 'project' / 'pnpm-lock.yaml').write_text('')
        result = ban_wrong_package_manager(bash_context('npx prettier --write .'))
        assert isinstance(result, Violation)
        assert 'npx' in result.messages[0]
        assert 'Use pnpm/pnpx instead' in result.messages[1]

    @pytest.mark.parametrize('command', ['yarn add lodash', 'echo "npm install"', 'make build'])
    def test_allowed_in_yarn_project(self, bash_context: MakeContext, tmp_path: Path, command: str) -> None:
        (tmp_path / 'project' / 'yarn.lock').write_text('')
        assert ban_wrong_package_manager(bash_context(command)) == PASS

    def test_no_lockfile_allows_anything(self, bash_context: MakeContext) -> None:
        assert ban_wrong_package_manager(bash_context('npm install')) == PASS
