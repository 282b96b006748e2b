"""Rules preferring relative and ``~`` paths over absolute ones in Bash commands."""

from __future__ import annotations

__all__ = [
    'ban_absolute_paths',
    'ban_home_dir_absolute_paths',
]

import os
from pathlib import Path

from policy_lib.rules.base import PASS, RuleContext, RuleResult, rule, violation
from policy_lib.shell import absolute_literals_under


@rule(
    name='ban-absolute-paths',
    config_key='banAbsolutePaths',
    description='Use relative paths instead of absolute paths under the working directory',
)
def ban_absolute_paths(ctx: RuleContext) -> RuleResult:
    if not ctx.command or not ctx.cwd:
        return PASS
    found = absolute_literals_under(ctx.parsed, ctx.cwd)
    if not found:
        return PASS

    path = found[0]
    relative = os.path.relpath(path, ctx.cwd)
    suggestion = '.' if relative == '.' else f'./{relative}'
    return violation(
        f'❌ Absolute path under cwd is not allowed: {path}',
        f'Use relative path instead: {suggestion}',
    )


@rule(
    name='ban-home-dir-absolute-paths',
    config_key='banHomeDirAbsolutePaths',
    description='Use ~ instead of absolute paths under the home directory',
)
def ban_home_dir_absolute_paths(ctx: RuleContext) -> RuleResult:
    if not ctx.command:
        return PASS
    home = str(Path.home())
    found = absolute_literals_under(ctx.parsed, home)
    if not found:
        return PASS

    path = found[0]
    tilde_path = '~' if path.rstrip('/') == home.rstrip('/') else f'~/{path[len(home.rstrip("/")) + 1 :]}'
    return violation(
        f'❌ Home directory absolute path is not allowed: {path}',
        f'Use tilde expansion instead: {tilde_path}',
    )
