"""Rules about how Bash is used: chaining, backgrounding, nested shells, pipes."""

from __future__ import annotations

__all__ = [
    'PIPE_FILTER_COMMANDS',
    'ban_background_bash',
    'ban_bash_minus_c',
    'ban_command_chaining',
    'ban_pipe_to_filter',
]

from policy_lib.rules.base import PASS, RuleContext, RuleResult, rule, violation
from policy_lib.schemas.tools import BashInput
from policy_lib.shell import (
    CHAIN_OPERATORS,
    Unparsable,
    first_piped_filter_command,
    has_top_level_separator,
    leading_change_directory_target,
)
from policy_lib.shell.commands import shell_minus_c

PIPE_FILTER_COMMANDS = frozenset({'grep', 'head', 'tail', 'awk', 'sed', 'cut', 'sort', 'uniq', 'wc', 'tr'})


@rule(
    name='ban-command-chaining',
    config_key='banCommandChaining',
    description='Run one command per Bash call instead of chaining with &&, ||, ; or newlines',
)
def ban_command_chaining(ctx: RuleContext) -> RuleResult:
    parsed = ctx.parsed
    if isinstance(parsed, Unparsable) or not has_top_level_separator(parsed, CHAIN_OPERATORS):
        return PASS

    target = leading_change_directory_target(parsed)
    if target is not None and ctx.is_cwd(target):
        remaining = [entry.pipeline.text for entry in parsed.entries[1:]]
        return violation(
            f'❌ cd {target} is not needed: it is already the current working directory',
            'Run the remaining command directly:',
            *(f'  Bash({command})' for command in remaining),
        )

    return violation(
        '❌ Chaining bash commands with &&, ||, ;, or newline is not allowed',
        'Please run commands separately for better tracking and error handling.',
    )


@rule(
    name='ban-background-bash',
    config_key='banBackgroundBash',
    description='Disallow running Bash commands in the background',
)
def ban_background_bash(ctx: RuleContext) -> RuleResult:
    if not isinstance(ctx.tool, BashInput) or ctx.tool.run_in_background is not True:
        return PASS
    return violation(
        '❌ Running bash commands in background is not allowed',
        'Background bash processes cannot be monitored properly and may cause issues.',
    )


@rule(
    name='ban-bash-minus-c',
    config_key='banBashMinusC',
    description='Disallow wrapping commands in bash -c or sh -c',
)
def ban_bash_minus_c(ctx: RuleContext) -> RuleResult:
    if not ctx.command:
        return PASS
    shell = shell_minus_c(ctx.parsed)
    if shell is None:
        return PASS
    return violation(
        f'❌ Using {shell} -c is not allowed',
        f'Run the command directly instead of wrapping it in {shell} -c.',
    )


@rule(
    name='ban-pipe-to-filter',
    config_key='banPipeToFilter',
    description='Disallow piping command output into filters like grep, head or tail',
)
def ban_pipe_to_filter(ctx: RuleContext) -> RuleResult:
    if not ctx.command:
        return PASS
    filter_name = first_piped_filter_command(ctx.parsed, PIPE_FILTER_COMMANDS)
    if filter_name is None:
        return PASS
    return violation(
        f'❌ Piping output to {filter_name} is not allowed',
        'Run the command first, then search its output file using the Read or Grep tools.',
        'For long output, the command result will include an output file path you can search.',
    )
