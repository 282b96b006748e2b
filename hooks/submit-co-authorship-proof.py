#!/usr/bin/env -S uv run --quiet --no-project --script
"""Record a co-authorship proof and print its PIN.

Usage:
    submit-co-authorship-proof.py "Claude Code made changes X, Y, Z in this session"

The PIN is the SHA-256 of the proof text. Add it to the commit message
right after the Co-authored-by trailer::

    Co-authored-by: Claude <noreply@anthropic.com>
    x-claude-code-co-authorship-proof: <PIN>

The PreToolUse hook only accepts a co-authored commit whose PIN has a
stored proof.
"""

# /// script
# requires-python = ">=3.12"
# dependencies = [
#   "filelock",
#   "pydantic>=2.0.0",
#   "claude-policy-hooks",
# ]
#
# [tool.uv.sources]
# claude-policy-hooks = { path = "../", editable = true }
# ///
from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from policy_lib.error_boundary import ErrorBoundary
from policy_lib.proofs import submit_proof
from policy_lib.tool_log import configure_logging

boundary = ErrorBoundary(exit_code=1)


@boundary.handler(OSError)
def _handle_os_error(exc: OSError) -> None:
    print(f'Could not store the proof: {exc}', file=sys.stderr)


@boundary
def main(argv: Sequence[str] | None = None) -> None:
    """Parse args, store the proof, and print the PIN."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.proof or not args.proof.strip():
        parser.print_usage(sys.stderr)
        print('error: a non-empty proof description is required', file=sys.stderr)
        sys.exit(1)

    configure_logging()
    record = submit_proof(args.proof)
    print(record.pin)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='submit-co-authorship-proof.py',
        description='Record what the agent contributed to a commit and print the proof PIN.',
    )
    parser.add_argument(
        'proof',
        nargs='?',
        help='Description of the changes the agent made in this session',
    )
    return parser


if __name__ == '__main__':
    main()
