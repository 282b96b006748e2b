"""Command policy engine for agent PreToolUse hooks."""

from __future__ import annotations

from policy_lib.error_boundary import ErrorBoundary, ErrorHandler
from policy_lib.evaluator import Allow, Decision, Deny, PolicyEvaluator, RuleEngineError
from policy_lib.invocation import ToolInvocation
from policy_lib.library_boundary import LibraryBoundary
from policy_lib.registry import RuleRegistry, build_registry

__all__ = [
    'Allow',
    'Decision',
    'Deny',
    'ErrorBoundary',
    'ErrorHandler',
    'LibraryBoundary',
    'PolicyEvaluator',
    'RuleEngineError',
    'RuleRegistry',
    'ToolInvocation',
    'build_registry',
]
