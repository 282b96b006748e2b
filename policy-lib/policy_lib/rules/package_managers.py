"""Package manager rules: run in the project directory, with the project's own manager."""

from __future__ import annotations

__all__ = [
    'LOCKFILE_PACKAGE_MANAGERS',
    'ban_cargo_manifest_path',
    'ban_wrong_package_manager',
    'ban_yarn_cwd',
    'detect_package_manager',
]

from pathlib import Path, PurePosixPath

from policy_lib.rules.base import PASS, RuleContext, RuleResult, rule, violation
from policy_lib.shell import invoked_command_names
from policy_lib.shell.commands import cargo_manifest_path, yarn_cwd

# Checked in order; the first lockfile found decides.
LOCKFILE_PACKAGE_MANAGERS = (
    ('yarn.lock', 'yarn'),
    ('bun.lockb', 'bun'),
    ('bun.lock', 'bun'),
    ('pnpm-lock.yaml', 'pnpm'),
    ('package-lock.json', 'npm'),
)

_MANAGER_COMMANDS = {
    'yarn': ('yarn',),
    'bun': ('bun', 'bunx'),
    'pnpm': ('pnpm', 'pnpx'),
    'npm': ('npm', 'npx'),
}
_ALL_MANAGER_COMMANDS = frozenset(command for commands in _MANAGER_COMMANDS.values() for command in commands)


def detect_package_manager(cwd: str) -> str | None:
    if not cwd:
        return None
    directory = Path(cwd)
    for lockfile, manager in LOCKFILE_PACKAGE_MANAGERS:
        if (directory / lockfile).exists():
            return manager
    return None


@rule(
    name='ban-cargo-manifest-path',
    config_key='banCargoManifestPath',
    description='Disallow cargo --manifest-path; run cargo in the project directory',
)
def ban_cargo_manifest_path(ctx: RuleContext) -> RuleResult:
    if not ctx.command:
        return PASS
    found = cargo_manifest_path(ctx.parsed)
    if found is None:
        return PASS

    messages = [
        '❌ cargo --manifest-path is not allowed',
        'Running cargo commands with a different manifest path is not permitted.',
    ]
    if found.value:
        messages += [
            'Please change directory first, then run the cargo command:',
            f'  Bash(cd {PurePosixPath(found.value).parent})',
            f'  Bash({found.command_without})',
        ]
    return violation(*messages)


@rule(
    name='ban-yarn-cwd',
    config_key='banYarnCwd',
    description='Disallow yarn --cwd; run yarn in the project directory',
)
def ban_yarn_cwd(ctx: RuleContext) -> RuleResult:
    if not ctx.command:
        return PASS
    found = yarn_cwd(ctx.parsed)
    if found is None:
        return PASS

    messages = [
        '❌ yarn --cwd is not allowed',
        'Running yarn commands with a different working directory is not permitted.',
        'Please cd to the target directory and run yarn commands there instead.',
    ]
    if found.value:
        messages += [f'  Bash(cd {found.value})', f'  Bash({found.command_without})']
    return violation(*messages)


@rule(
    name='ban-wrong-package-manager',
    config_key='banWrongPackageManager',
    description="Use the package manager matching the project's lockfile",
)
def ban_wrong_package_manager(ctx: RuleContext) -> RuleResult:
    if not ctx.command:
        return PASS
    manager = detect_package_manager(ctx.cwd)
    if manager is None:
        return PASS

    allowed = _MANAGER_COMMANDS[manager]
    wrong = sorted((invoked_command_names(ctx.parsed) & _ALL_MANAGER_COMMANDS) - set(allowed))
    if not wrong:
        return PASS
    return violation(
        f'❌ Wrong package manager: {", ".join(wrong)} used in a {manager} project',
        f'This project uses {manager} (detected from lock file). Use {"/".join(allowed)} instead.',
    )
