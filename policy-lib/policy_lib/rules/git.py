"""git rules.

Most are pure command analysis. The checkout and remote rules query the
repository in the invocation's working directory and pass whenever a query
fails.
"""

from __future__ import annotations

__all__ = [
    'GitRemote',
    'ban_git_add_all',
    'ban_git_c',
    'ban_git_checkout_redundant_start_point',
    'ban_git_commit_amend',
    'ban_git_commit_no_verify',
    'ban_git_remote_set_url',
    'normalize_git_url',
]

import logging
import re
from dataclasses import dataclass
from typing import Literal

from policy_lib import git_queries
from policy_lib.git_queries import GitQueryError
from policy_lib.rules.base import PASS, RuleContext, RuleResult, rule, violation
from policy_lib.shell import Unparsable
from policy_lib.shell.commands import (
    GitRemoteSetUrl,
    git_add_all_flag,
    git_change_directory,
    git_checkout_new_branch,
    git_remote_set_url,
)

logger = logging.getLogger(__name__)

# Text fallbacks for commands bashlex can't parse.
_GIT_ADD_ALL_RE = re.compile(
    r'\bgit\s+add\s+(?:[^|;&]*?\s)?(?P<flag>-[a-zA-Z]*A(?=\s|$)|--all\b|--no-ignore-removal\b)'
)
_GIT_REMOTE_SET_URL_RE = re.compile(r'\bgit\s+remote\s+set-url\s+(?P<remote>\S+)\s+(?P<url>\S+)')

_SCP_STYLE_URL_RE = re.compile(r'^(?:[\w.-]+@)?(?P<host>[^:/]+):(?P<path>.+)$')
_SCHEME_URL_RE = re.compile(r'^(?P<scheme>ssh|git\+ssh|https?)://(?:[^@/]+@)?(?P<host>[^/:]+)(?::\d+)?/(?P<path>.+)$')


@dataclass(frozen=True, slots=True)
class GitRemote:
    protocol: Literal['ssh', 'https']
    canonical: str


def normalize_git_url(url: str) -> GitRemote | None:
    """Protocol plus ``host/owner/repo`` for an SSH or HTTP(S) remote URL."""
    if match := _SCHEME_URL_RE.match(url):
        protocol: Literal['ssh', 'https'] = 'https' if match['scheme'].startswith('http') else 'ssh'
        path = match['path'].removesuffix('.git')
        return GitRemote(protocol=protocol, canonical=f'{match["host"]}/{path}')
    if '://' not in url and (match := _SCP_STYLE_URL_RE.match(url)):
        path = match['path'].removesuffix('.git')
        return GitRemote(protocol='ssh', canonical=f'{match["host"]}/{path}')
    return None


@rule(
    name='ban-git-c',
    config_key='banGitC',
    description='Disallow git -C; cd to the repository instead',
)
def ban_git_c(ctx: RuleContext) -> RuleResult:
    if not ctx.command:
        return PASS
    found = git_change_directory(ctx.parsed)
    if found is None:
        return PASS

    if found.value is not None and ctx.is_cwd(found.value):
        return violation(
            f'❌ git -C {found.value} is not needed: it is already the current working directory',
            'Run the command without -C:',
            f'  Bash({found.command_without})',
        )

    messages = [
        '❌ git -C is not allowed',
        'Running git commands in a different directory is not permitted.',
        'Please cd to the target directory and run git commands there instead.',
    ]
    if found.value is not None:
        messages += [f'  Bash(cd {found.value})', f'  Bash({found.command_without})']
    return violation(*messages)


@rule(
    name='ban-git-add-all',
    config_key='banGitAddAll',
    description='Disallow git add -A, --all and --no-ignore-removal',
)
def ban_git_add_all(ctx: RuleContext) -> RuleResult:
    if not ctx.command:
        return PASS
    parsed = ctx.parsed
    if isinstance(parsed, Unparsable):
        match = _GIT_ADD_ALL_RE.search(ctx.command)
        flag = match['flag'] if match else None
    else:
        flag = git_add_all_flag(parsed)
    if flag is None:
        return PASS
    return violation(
        '❌ git add -A/--all/--no-ignore-removal is not allowed',
        f'Found: {flag}',
        'These flags stage all changes including deletions across the entire repository.',
        'Please use "git add ." to stage changes in the current directory instead.',
    )


@rule(
    name='ban-git-commit-amend',
    config_key='banGitCommitAmend',
    description='Disallow git commit --amend; create new commits instead',
)
def ban_git_commit_amend(ctx: RuleContext) -> RuleResult:
    command = ctx.command.lower()
    if 'git commit' not in command or '--amend' not in command:
        return PASS
    return violation(
        '❌ git commit --amend is not allowed',
        'Amending commits can alter git history and is not permitted.',
    )


@rule(
    name='ban-git-commit-no-verify',
    config_key='banGitCommitNoVerify',
    description='Disallow git commit --no-verify',
)
def ban_git_commit_no_verify(ctx: RuleContext) -> RuleResult:
    command = ctx.command.lower()
    if 'git commit' not in command or '--no-verify' not in command:
        return PASS
    return violation(
        '❌ git commit --no-verify is not allowed',
        'Bypassing pre-commit hooks can introduce code quality issues and is not permitted.',
    )


@rule(
    name='ban-git-checkout-redundant-start-point',
    config_key='banGitCheckoutRedundantStartPoint',
    description='Disallow naming the current detached HEAD as the start point of git checkout -b',
)
def ban_git_checkout_redundant_start_point(ctx: RuleContext) -> RuleResult:
    if not ctx.command:
        return PASS
    checkout = git_checkout_new_branch(ctx.parsed)
    if checkout is None or not git_queries.is_head_detached(ctx.cwd):
        return PASS

    try:
        head = git_queries.resolve_commit('HEAD', ctx.cwd)
        start_point = git_queries.resolve_commit(checkout.start_point, ctx.cwd)
    except GitQueryError as exc:
        logger.debug('Skipping start-point check: %s', exc)
        return PASS
    if head != start_point:
        return PASS

    return violation(
        '❌ Unnecessary start-point in git checkout -b',
        f'You are already on a detached HEAD at {checkout.start_point}.',
        f'Just use: git checkout -b {checkout.new_branch}',
        f'Instead of: git checkout -b {checkout.new_branch} {checkout.start_point}',
    )


@rule(
    name='ban-git-remote-set-url',
    config_key='banGitRemoteSetUrl',
    description='Disallow switching a remote from SSH to HTTPS',
)
def ban_git_remote_set_url(ctx: RuleContext) -> RuleResult:
    if not ctx.command:
        return PASS
    parsed = ctx.parsed
    if isinstance(parsed, Unparsable):
        match = _GIT_REMOTE_SET_URL_RE.search(ctx.command)
        change = GitRemoteSetUrl(remote=match['remote'], url=match['url']) if match else None
    else:
        change = git_remote_set_url(parsed)
    if change is None:
        return PASS

    new = normalize_git_url(change.url)
    if new is None or new.protocol != 'https':
        return PASS
    try:
        current_url = git_queries.remote_url(change.remote, ctx.cwd)
    except GitQueryError as exc:
        logger.debug('Skipping remote URL check: %s', exc)
        return PASS

    current = normalize_git_url(current_url)
    if current is None or current.protocol != 'ssh' or current.canonical != new.canonical:
        return PASS
    return violation(
        '❌ Changing git remote URL from SSH to HTTPS is not allowed',
        f'The remote "{change.remote}" is already configured with SSH: {current_url}',
        'Switching to HTTPS would break SSH key authentication.',
        'Keep the existing SSH URL.',
    )
