"""Pre-exit rules for the web tools.

These run before the read-only exemption, so they apply to WebSearch and
WebFetch even though the main rule phase skips those tools.
"""

from __future__ import annotations

__all__ = [
    'ban_outdated_year_in_search',
    'github_repo_name',
    'prefer_local_github_repo',
]

import re
from pathlib import Path

from policy_lib.paths import collapse_home
from policy_lib.rules.base import PASS, RuleContext, RuleResult, rule, violation
from policy_lib.schemas.tools import WebFetchInput, WebSearchInput

_YEAR_RE = re.compile(r'\b(20[2-9]\d)\b')

_GITHUB_URL_PATTERNS = (
    re.compile(r'^https?://raw\.githubusercontent\.com/[^/]+/(?P<repo>[^/]+)/'),
    re.compile(r'^https?://github\.com/[^/]+/(?P<repo>[^/]+)/blob/'),
    re.compile(r'^https?://github\.com/[^/]+/(?P<repo>[^/]+)/tree/'),
)


def github_repo_name(url: str) -> str | None:
    """Repository name from a GitHub raw, blob or tree URL."""
    for pattern in _GITHUB_URL_PATTERNS:
        if match := pattern.match(url):
            return match['repo']
    return None


@rule(
    name='ban-outdated-year-in-search',
    config_key='banOutdatedYearInSearch',
    description='Disallow web searches naming a past year',
    phase='pre-exit',
)
def ban_outdated_year_in_search(ctx: RuleContext) -> RuleResult:
    if not isinstance(ctx.tool, WebSearchInput):
        return PASS
    current_year = ctx.now.year
    for year in _YEAR_RE.findall(ctx.tool.query):
        if int(year) < current_year:
            return violation(
                f'❌ Web searches containing outdated year "{year}" are not allowed',
                f'The current year is {current_year}. Please update your search query to use the current year.',
            )
    return PASS


@rule(
    name='prefer-local-github-repo',
    config_key='preferLocalGithubRepo',
    description='Read sibling clones locally instead of fetching their files from GitHub',
    phase='pre-exit',
)
def prefer_local_github_repo(ctx: RuleContext) -> RuleResult:
    if not isinstance(ctx.tool, WebFetchInput) or not ctx.cwd:
        return PASS
    repo = github_repo_name(ctx.tool.url)
    if repo is None:
        return PASS

    sibling = Path(ctx.cwd).parent / repo
    if not (sibling / '.git').exists():
        return PASS
    return violation(
        f'❌ The repository "{repo}" is cloned locally at {collapse_home(sibling)}',
        'Read the files directly from the local directory instead of fetching from GitHub.',
    )
