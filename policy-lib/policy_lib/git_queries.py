"""Read-only git queries run in the invocation's working directory.

Every query raises ``GitQueryError`` on failure: git missing or hung, not a
repository, unknown revision or remote. Rules treat that as "skip the check".
"""

from __future__ import annotations

__all__ = [
    'GitQueryError',
    'current_branch_ref',
    'is_head_detached',
    'remote_url',
    'resolve_commit',
]

import logging
import subprocess
from collections.abc import Sequence

from policy_lib.library_boundary import LibraryBoundary

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 3


class GitQueryError(Exception):
    """A git query failed."""


@LibraryBoundary(GitQueryError)
def _run_git(args: Sequence[str], cwd: str) -> str:
    logger.debug('Running git %s in %s', ' '.join(args), cwd or '.')
    result = subprocess.run(
        ['git', *args],
        cwd=cwd or None,
        capture_output=True,
        text=True,
        check=True,
        timeout=GIT_TIMEOUT_SECONDS,
    )
    return result.stdout.strip()


def current_branch_ref(cwd: str) -> str:
    """Full ref of the checked-out branch, e.g. ``refs/heads/main``."""
    return _run_git(['symbolic-ref', '-q', 'HEAD'], cwd)


def is_head_detached(cwd: str) -> bool:
    """True when HEAD points at a commit rather than a branch.

    Also true outside a repository; callers resolve revisions next and skip
    on the resulting ``GitQueryError``.
    """
    try:
        current_branch_ref(cwd)
    except GitQueryError:
        return True
    return False


def resolve_commit(revision: str, cwd: str) -> str:
    """Commit hash a revision (branch, tag, sha, ``HEAD``) points at."""
    return _run_git(['rev-parse', '--verify', '--quiet', f'{revision}^{{commit}}'], cwd)


def remote_url(remote: str, cwd: str) -> str:
    return _run_git(['remote', 'get-url', remote], cwd)
