"""Rule building blocks.

A rule is a plain function from ``RuleContext`` to ``RuleResult``, wrapped by
the ``@rule(...)`` decorator into a ``Rule`` carrying its metadata. The
decorator registers nothing. ``registry.build_registry()`` lists every rule
explicitly, so the catalog and its order live in one place.

    @rule(name='ban-git-commit-amend', config_key='banGitCommitAmend', description='...')
    def ban_git_commit_amend(ctx: RuleContext) -> RuleResult:
        ...
"""

from __future__ import annotations

__all__ = [
    'PASS',
    'Pass',
    'Phase',
    'Rule',
    'RuleCheck',
    'RuleContext',
    'RuleMeta',
    'RuleResult',
    'SideEffect',
    'Violation',
    'rule',
    'violation',
]

import functools
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Literal

from policy_lib.invocation import ToolInvocation
from policy_lib.schemas.tools import BashInput, ToolInput
from policy_lib.shell import ParsedCommand, Unparsable, parse

type Phase = Literal['pre-exit', 'main']

# --- Results ---


@dataclass(frozen=True, slots=True)
class Pass:
    pass


@dataclass(frozen=True, slots=True)
class Violation:
    """Blocks the invocation. Messages are written to stderr one per line."""

    messages: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class SideEffect:
    """The rule acted (e.g. wrote a log entry) and does not block."""

    description: str = ''


type RuleResult = Pass | Violation | SideEffect

PASS = Pass()


def violation(*messages: str) -> Violation:
    return Violation(messages=messages)


# --- Context ---


@dataclass(frozen=True)
class RuleContext:
    """Everything a rule may look at. Built once per invocation and shared by all rules.

    The command is parsed lazily on first access to ``parsed``, so non-Bash
    tools never pay for parsing.
    """

    invocation: ToolInvocation
    now: datetime = field(default_factory=datetime.now)

    @property
    def tool_name(self) -> str:
        return self.invocation.tool_name

    @property
    def tool(self) -> ToolInput:
        return self.invocation.tool

    @property
    def cwd(self) -> str:
        return self.invocation.cwd

    @property
    def command(self) -> str:
        """The Bash command, or ``''`` for any other tool."""
        return self.tool.command if isinstance(self.tool, BashInput) else ''

    @functools.cached_property
    def parsed(self) -> ParsedCommand | Unparsable:
        return parse(self.command)

    def is_cwd(self, path: str) -> bool:
        """True if ``path`` (relative paths taken from cwd, ``~`` expanded) is the working directory."""
        if not self.cwd:
            return False
        cwd = Path(self.cwd)
        try:
            target = Path(path).expanduser()
        except RuntimeError:
            # ~user with no such account
            return False
        return (cwd / target).resolve() == cwd.resolve()


# --- Rules ---


type RuleCheck = Callable[[RuleContext], RuleResult]


@dataclass(frozen=True, slots=True)
class RuleMeta:
    name: str
    config_key: str
    recommended: bool
    phase: Phase
    description: str


@dataclass(frozen=True, slots=True)
class Rule:
    meta: RuleMeta
    check: RuleCheck

    def __call__(self, ctx: RuleContext) -> RuleResult:
        return self.check(ctx)


def rule(
    *,
    name: str,
    config_key: str,
    description: str,
    phase: Phase = 'main',
    recommended: bool = True,
) -> Callable[[RuleCheck], Rule]:
    """Wrap a check function as a ``Rule``."""

    def decorate(check: RuleCheck) -> Rule:
        return Rule(
            meta=RuleMeta(
                name=name,
                config_key=config_key,
                recommended=recommended,
                phase=phase,
                description=description,
            ),
            check=check,
        )

    return decorate
