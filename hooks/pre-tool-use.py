#!/usr/bin/env -S uv run --quiet --no-project --script
"""PreToolUse hook: enforce the command policy on every tool call.

Reads the hook payload from stdin, evaluates the enabled rules, and reports
the decision through the exit code:

  - ``0``: allow. Nothing is written to stderr.
  - ``2``: deny. Each violation message goes to stderr on its own line,
    starting with a marker glyph (``❌``). A rule that crashed also denies,
    with a ``⛔ Rule engine failure`` first line so it is never mistaken for
    a policy decision.
  - ``1``: the payload (or the config file) is malformed. The agent reports
    this as a hook error and does not block the call.

Rules are toggled per config key in ``~/.config/claude-policy/config.json``
(see ``policy_lib.config``). Tool calls are logged to
``~/.local/state/claude-policy/hooks.log``.

Hook docs: https://code.claude.com/docs/en/hooks#pretooluse
"""

# /// script
# requires-python = ">=3.12"
# dependencies = [
#   "bashlex",
#   "pydantic>=2.0.0",
#   "claude-policy-hooks",
# ]
#
# [tool.uv.sources]
# claude-policy-hooks = { path = "../", editable = true }
# ///
from __future__ import annotations

__all__ = [
    'EXIT_ALLOW',
    'EXIT_DENY',
    'EXIT_MALFORMED',
    'emit_denial',
]

import json
import logging
import sys
from typing import NoReturn

import pydantic
from policy_lib.config import load_config, resolve_hooks
from policy_lib.error_boundary import ErrorBoundary
from policy_lib.evaluator import Allow, Deny, PolicyEvaluator, RuleEngineError
from policy_lib.invocation import ToolInvocation
from policy_lib.registry import build_registry
from policy_lib.rules import RuleContext
from policy_lib.schemas.hooks import PreToolUseHookInput
from policy_lib.schemas.tools import READ_ONLY_TOOLS
from policy_lib.tool_log import configure_logging, log_tool_use

logger = logging.getLogger('policy_lib.hooks.pre_tool_use')

EXIT_ALLOW = 0
EXIT_MALFORMED = 1
EXIT_DENY = 2

# --- Error boundary (process-level) ---
# Malformed input and unexpected errors exit 1 (non-blocking hook error).
# A crashed rule exits 2: the call is blocked, with a distinct message.

boundary = ErrorBoundary(exit_code=EXIT_MALFORMED)


@boundary.handler(pydantic.ValidationError)
def _handle_validation_error(exc: pydantic.ValidationError) -> None:
    print(f'pre-tool-use hook schema violation: {exc.error_count()} error(s) in {exc.title}', file=sys.stderr)
    for error in exc.errors(include_url=False):
        location = '.'.join(str(part) for part in error['loc']) or '<root>'
        print(f'  {location}: {error["msg"]}', file=sys.stderr)


@boundary.handler(json.JSONDecodeError)
def _handle_json_error(exc: json.JSONDecodeError) -> None:
    print(f'pre-tool-use hook schema violation: invalid JSON ({exc})', file=sys.stderr)


@boundary.handler(RuleEngineError, exit_code=EXIT_DENY)
def _handle_rule_engine_error(exc: RuleEngineError) -> None:
    logger.error('Rule %s failed', exc.rule_name, exc_info=exc.error)
    print(f'⛔ Rule engine failure in {exc.rule_name}: {exc.error!r}', file=sys.stderr)
    print('This is a bug in the policy hook, not a policy violation. The tool call was blocked.', file=sys.stderr)


@boundary.handler(Exception)
def _handle_error(exc: Exception) -> None:
    logger.error('pre-tool-use hook error', exc_info=exc)
    print(f'pre-tool-use hook error: {exc!r}', file=sys.stderr)


# --- Decision output ---


def emit_denial(decision: Deny) -> NoReturn:
    for message in decision.messages:
        print(message, file=sys.stderr)
    sys.exit(EXIT_DENY)


# --- Main ---


@boundary
def main() -> None:
    configure_logging()
    hook_input = PreToolUseHookInput.model_validate_json(sys.stdin.read())
    invocation = ToolInvocation.from_hook_input(hook_input)

    registry = build_registry()
    enabled = resolve_hooks(load_config().hooks, registry.recommended_defaults())
    decision = PolicyEvaluator(registry, enabled).evaluate(RuleContext(invocation))

    match decision:
        case Deny():
            emit_denial(decision)
        case Allow():
            if enabled['logReadOnlyToolUse'] and invocation.tool_name in READ_ONLY_TOOLS:
                log_tool_use(invocation)


if __name__ == '__main__':
    main()
