"""Tests for two-phase policy evaluation."""

from __future__ import annotations

from collections.abc import Callable

import pytest
from policy_lib.evaluator import Allow, Deny, PolicyEvaluator, RuleEngineError
from policy_lib.registry import RuleRegistry, build_registry
from policy_lib.rules import PASS, RuleContext, RuleResult, SideEffect, rule, violation

type MakeContext = Callable[..., RuleContext]

calls: list[str] = []


@pytest.fixture(autouse=True)
def clear_calls() -> None:
    calls.clear()


@rule(name='pre-deny-search', config_key='preDenySearch', description='Denies WebSearch', phase='pre-exit')
def _pre_deny_search(ctx: RuleContext) -> RuleResult:
    calls.append('pre-deny-search')
    return violation('❌ no searching') if ctx.tool_name == 'WebSearch' else PASS


@rule(name='deny-rm', config_key='denyRm', description='Denies rm')
def _deny_rm(ctx: RuleContext) -> RuleResult:
    calls.append('deny-rm')
    return violation('❌ no rm', 'Use trash instead.') if ctx.command.startswith('rm') else PASS


@rule(name='deny-everything', config_key='denyEverything', description='Denies every call')
def _deny_everything(ctx: RuleContext) -> RuleResult:
    calls.append('deny-everything')
    return violation('❌ denied')


@rule(name='record', config_key='record', description='Side effect')
def _record(ctx: RuleContext) -> RuleResult:
    calls.append('record')
    return SideEffect('recorded')


@rule(name='explode', config_key='explode', description='Raises')
def _explode(ctx: RuleContext) -> RuleResult:
    raise KeyError('missing')


REGISTRY = RuleRegistry([_pre_deny_search, _deny_rm, _deny_everything, _record, _explode])


def _evaluator(*enabled: str) -> PolicyEvaluator:
    return PolicyEvaluator(REGISTRY, {key: True for key in enabled})


class TestEvaluate:
    def test_first_violation_wins(self, bash_context: MakeContext) -> None:
        decision = _evaluator('denyRm', 'denyEverything').evaluate(bash_context('rm -rf build'))
        assert decision == Deny(rule_name='deny-rm', messages=('❌ no rm', 'Use trash instead.'))
        assert calls == ['deny-rm']

    def test_disabled_rules_skipped(self, bash_context: MakeContext) -> None:
        decision = _evaluator('record').evaluate(bash_context('rm -rf build'))
        assert decision == Allow(side_effects=('record',))
        assert calls == ['record']

    def test_side_effects_collected_in_order(self, bash_context: MakeContext) -> None:
        assert _evaluator('denyRm', 'record').evaluate(bash_context('make')) == Allow(('record',))
        assert calls == ['deny-rm', 'record']

    def test_explicit_false_disables(self, bash_context: MakeContext) -> None:
        evaluator = PolicyEvaluator(REGISTRY, {'denyEverything': False})
        assert evaluator.evaluate(bash_context('make')) == Allow()

    def test_pre_exit_runs_before_main(self, bash_context: MakeContext) -> None:
        _evaluator('preDenySearch', 'record').evaluate(bash_context('make'))
        assert calls == ['pre-deny-search', 'record']


class TestExemptTools:
    @pytest.mark.parametrize(
        'tool_name, tool_input',
        [
            ('Grep', {'pattern': 'x'}),
            ('Glob', {'pattern': '**/*.py'}),
            ('TodoWrite', {'todos': []}),
            ('mcp__browser__navigate', {'url': 'https://example.com'}),
        ],
        ids=['read-only', 'glob', 'internal', 'mcp'],
    )
    def test_main_phase_skipped(self, make_context: MakeContext, tool_name: str, tool_input: dict[str, object]) -> None:
        decision = _evaluator('preDenySearch', 'denyEverything').evaluate(make_context(tool_name, tool_input))
        assert decision == Allow()
        assert calls == ['pre-deny-search']

    def test_pre_exit_applies_to_read_only_tools(self, make_context: MakeContext) -> None:
        decision = _evaluator('preDenySearch').evaluate(make_context('WebSearch', {'query': 'x'}))
        assert isinstance(decision, Deny)
        assert decision.rule_name == 'pre-deny-search'

    def test_unknown_tool_runs_main_phase(self, make_context: MakeContext) -> None:
        decision = _evaluator('denyEverything').evaluate(make_context('FutureTool', {}))
        assert isinstance(decision, Deny)


class TestRuleEngineError:
    def test_raising_rule_is_reported(self, bash_context: MakeContext) -> None:
        with pytest.raises(RuleEngineError) as exc_info:
            _evaluator('explode').evaluate(bash_context('make'))
        assert exc_info.value.rule_name == 'explode'
        assert isinstance(exc_info.value.error, KeyError)
        assert exc_info.value.__cause__ is exc_info.value.error
        assert str(exc_info.value) == "explode: KeyError('missing')"

    def test_raising_rule_after_violation_never_runs(self, bash_context: MakeContext) -> None:
        decision = _evaluator('denyEverything', 'explode').evaluate(bash_context('make'))
        assert isinstance(decision, Deny)


class TestRecommendedDefaults:
    """The built registry with every recommended rule enabled."""

    @pytest.fixture
    def evaluator(self) -> PolicyEvaluator:
        registry = build_registry()
        return PolicyEvaluator(registry, registry.recommended_defaults())

    @pytest.mark.parametrize(
        'command, rule_name',
        [
            ('npm install && npm test', 'ban-command-chaining'),
            ('git log | grep fix', 'ban-pipe-to-filter'),
            ('grep -rn TODO .', 'ban-grep-command'),
            ('cat README.md', 'ban-file-operation-commands'),
            ('find . -name "*.py" -delete', 'ban-find-delete'),
            ('git add --all', 'ban-git-add-all'),
        ],
    )
    def test_denied(self, evaluator: PolicyEvaluator, bash_context: MakeContext, command: str, rule_name: str) -> None:
        decision = evaluator.evaluate(bash_context(command))
        assert isinstance(decision, Deny)
        assert decision.rule_name == rule_name
        assert decision.messages[0][0] in '❌⚠'

    @pytest.mark.parametrize(
        'command',
        ['git status', 'git add .', 'ls -la', 'tail -100 app.log', 'cat <<EOF\nnotes\nEOF', 'grep -v x f.txt'],
    )
    def test_allowed(self, evaluator: PolicyEvaluator, bash_context: MakeContext, command: str) -> None:
        decision = evaluator.evaluate(bash_context(command))
        assert decision == Allow(('log-tool-use',))
