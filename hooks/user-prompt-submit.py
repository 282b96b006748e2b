#!/usr/bin/env -S uv run --quiet --no-project --script
"""UserPromptSubmit hook: log submitted prompts.

Logs a truncated preview of each prompt with its working directory when the
``logPrompts`` config key is enabled. Never blocks a prompt: every outcome,
including a malformed payload, exits 0.

Hook docs: https://code.claude.com/docs/en/hooks#userpromptsubmit
"""

# /// script
# requires-python = ">=3.12"
# dependencies = [
#   "pydantic>=2.0.0",
#   "claude-policy-hooks",
# ]
#
# [tool.uv.sources]
# claude-policy-hooks = { path = "../", editable = true }
# ///
from __future__ import annotations

import sys

from policy_lib.config import load_config, resolve_hooks
from policy_lib.error_boundary import ErrorBoundary
from policy_lib.registry import build_registry
from policy_lib.schemas.hooks import UserPromptSubmitHookInput
from policy_lib.tool_log import configure_logging, log_prompt

# --- Error boundary (process-level) ---
# On unexpected error: log to stderr, exit 0 (the prompt goes through)

boundary = ErrorBoundary(exit_code=0)


@boundary.handler(Exception)
def _handle_error(exc: Exception) -> None:
    print(f'user-prompt-submit hook error: {exc!r}', file=sys.stderr)


@boundary
def main() -> None:
    configure_logging()
    hook_input = UserPromptSubmitHookInput.model_validate_json(sys.stdin.read())

    enabled = resolve_hooks(load_config().hooks, build_registry().recommended_defaults())
    if enabled['logPrompts']:
        log_prompt(hook_input.session_id, hook_input.transcript_path, hook_input.prompt, hook_input.cwd)


if __name__ == '__main__':
    main()
