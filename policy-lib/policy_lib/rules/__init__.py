"""Policy rules. Each rule module groups the rules for one concern."""

from __future__ import annotations

from policy_lib.rules.base import (
    PASS,
    Pass,
    Phase,
    Rule,
    RuleContext,
    RuleMeta,
    RuleResult,
    SideEffect,
    Violation,
    rule,
    violation,
)

__all__ = [
    'PASS',
    'Pass',
    'Phase',
    'Rule',
    'RuleContext',
    'RuleMeta',
    'RuleResult',
    'SideEffect',
    'Violation',
    'rule',
    'violation',
]
