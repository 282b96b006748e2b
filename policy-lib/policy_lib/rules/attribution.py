"""Commits crediting the agent as co-author must carry a submitted proof."""

from __future__ import annotations

__all__ = [
    'PROOF_MARKER_RE',
    'require_co_authorship_proof',
]

import re

from policy_lib import proofs
from policy_lib.rules.base import PASS, RuleContext, RuleResult, rule, violation

PROOF_MARKER_RE = re.compile(r'x-claude-code-co-authorship-proof:\s*([a-f\d]{64})', re.IGNORECASE)


@rule(
    name='require-co-authorship-proof',
    config_key='requireCoAuthorshipProof',
    description='Require a submitted co-authorship proof for commits with a Co-authored-by trailer',
)
def require_co_authorship_proof(ctx: RuleContext) -> RuleResult:
    command = ctx.command.lower()
    if 'git commit' not in command or 'co-authored-by' not in command:
        return PASS

    if match := PROOF_MARKER_RE.search(ctx.command):
        pin = match.group(1).lower()
        if proofs.proof_exists(pin):
            return PASS
        return violation(
            f'❌ Invalid co-authorship proof PIN: {match.group(1)}',
            'The provided PIN does not correspond to a valid proof submission.',
        )

    return violation(
        '⚠️  This commit includes co-authorship. Claude Code must:',
        "1. FIRST run 'git diff --cached' to see what changes are being committed",
        '2. ACTUALLY check the session transcript - did Claude Code make these specific changes?',
        '3. If Claude Code genuinely co-authored, submit proof with:',
        '   submit-co-authorship-proof.py "Claude Code made changes X, Y, Z in this session"',
        '4. Add the returned PIN right after the Co-authored-by line:',
        '   Co-authored-by: Claude <noreply@anthropic.com>',
        '   x-claude-code-co-authorship-proof: <PIN-FROM-SUBMIT-PROOF>',
        '5. If Claude Code did NOT make these changes, remove Co-authored-by and try again.',
    )
