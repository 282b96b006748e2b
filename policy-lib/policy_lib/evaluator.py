"""Two-phase policy evaluation.

1. Pre-exit rules run for every tool.
2. Read-only, internal and MCP tools are allowed here.
3. Main rules run for everything else.

Within each phase rules run in registry order and the first violation
denies. A rule that raises is reported as ``RuleEngineError`` rather than
being counted as a pass or a violation.
"""

from __future__ import annotations

__all__ = [
    'Allow',
    'Decision',
    'Deny',
    'PolicyEvaluator',
    'RuleEngineError',
]

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from policy_lib.registry import RuleRegistry
from policy_lib.rules import Pass, Phase, Rule, RuleContext, RuleResult, SideEffect, Violation
from policy_lib.schemas.tools import is_exempt_tool

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Allow:
    side_effects: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Deny:
    rule_name: str
    messages: tuple[str, ...]


type Decision = Allow | Deny


class RuleEngineError(Exception):
    """A rule raised instead of returning a result."""

    def __init__(self, rule_name: str, error: Exception) -> None:
        super().__init__(f'{rule_name}: {error!r}')
        self.rule_name = rule_name
        self.error = error


class PolicyEvaluator:
    """Runs the enabled rules of a registry against one invocation.

    Args:
        registry: Rules in evaluation order.
        enabled: Config key to enabled flag. Keys not present are disabled.
    """

    def __init__(self, registry: RuleRegistry, enabled: Mapping[str, bool]) -> None:
        self._registry = registry
        self._enabled = dict(enabled)

    def enabled_rules(self, phase: Phase) -> list[Rule]:
        return [rule for rule in self._registry.in_phase(phase) if self._enabled.get(rule.meta.config_key, False)]

    def evaluate(self, ctx: RuleContext) -> Decision:
        """Decide one invocation.

        Raises:
            RuleEngineError: A rule raised.
        """
        side_effects: list[str] = []

        denial = self._run_phase('pre-exit', ctx, side_effects)
        if denial is not None:
            return denial

        if is_exempt_tool(ctx.tool_name):
            logger.debug('%s is exempt from main-phase rules', ctx.tool_name)
            return Allow(tuple(side_effects))

        denial = self._run_phase('main', ctx, side_effects)
        if denial is not None:
            return denial
        return Allow(tuple(side_effects))

    def _run_phase(self, phase: Phase, ctx: RuleContext, side_effects: list[str]) -> Deny | None:
        for rule in self.enabled_rules(phase):
            match _run_rule(rule, ctx):
                case Violation(messages=messages):
                    logger.info('Denied %s: %s', ctx.tool_name, rule.meta.name)
                    return Deny(rule_name=rule.meta.name, messages=messages)
                case SideEffect():
                    side_effects.append(rule.meta.name)
                case Pass():
                    pass
        return None


def _run_rule(rule: Rule, ctx: RuleContext) -> RuleResult:
    try:
        result = rule(ctx)
    except Exception as exc:
        raise RuleEngineError(rule.meta.name, exc) from exc
    logger.debug('%s -> %s', rule.meta.name, type(result).__name__)
    return result
