"""Rules steering file reading, searching and listing toward the dedicated tools.

Each ban steps aside when the invocation needs something the dedicated tool
can't do: ``cat`` feeding a heredoc, ``find -mtime``, ``grep -v``, ``ls -la``.
"""

from __future__ import annotations

__all__ = [
    'FILE_OPERATION_COMMANDS',
    'FIND_UNSUPPORTED_FLAGS',
    'ban_file_operation_commands',
    'ban_find_command',
    'ban_find_delete',
    'ban_find_exec',
    'ban_grep_command',
    'ban_ls_command',
    'grep_has_unsupported_flags',
]

import re
from collections.abc import Sequence
from pathlib import PurePosixPath

from policy_lib.rules.base import PASS, RuleContext, RuleResult, rule, violation
from policy_lib.shell import ParsedCommand, SimpleCommand, Unparsable, iter_simple_commands, literal_arguments_of
from policy_lib.shell.commands import find_exec

FILE_OPERATION_COMMANDS = ('cat', 'sed', 'head', 'tail', 'awk')

_CAT_HEREDOC_RE = re.compile(r'''\bcat\s+<<-?['"]?\w+['"]?''')
_TAIL_OFFSET_RE = re.compile(r'^\s*tail\s+-\d+\s+\S+\s*$')
_LINE_OFFSET_RE = re.compile(r'^-\d+$')

# Flags the Grep tool can emulate. Anything else needs the real grep/rg.
_GREP_SHORT_FLAGS = frozenset({'-A', '-B', '-C', '-i', '-n', '-l', '-c', '-U', '-e', '-r', '-R'})
_GREP_SHORT_FLAGS_WITH_VALUE = frozenset({'-A', '-B', '-C', '-e'})
_GREP_LONG_FLAGS = frozenset(
    {
        '--after-context',
        '--before-context',
        '--context',
        '--ignore-case',
        '--line-number',
        '--files-with-matches',
        '--count',
        '--multiline',
        '--multiline-dotall',
        '--glob',
        '--type',
        '--regexp',
        '--recursive',
        '--include',
        '--no-filename',
        '--with-filename',
        '--color',
        '--colour',
        '--no-line-number',
    }
)
_GREP_LONG_FLAGS_WITH_VALUE = frozenset(
    {
        '--after-context',
        '--before-context',
        '--context',
        '--glob',
        '--type',
        '--regexp',
        '--include',
        '--color',
        '--colour',
    }
)

# find predicates and actions the Glob tool can't express.
FIND_UNSUPPORTED_FLAGS = frozenset(
    {
        '-type',
        '-mtime',
        '-ctime',
        '-atime',
        '-newer',
        '-newermt',
        '-newerct',
        '-newerat',
        '-size',
        '-empty',
        '-user',
        '-group',
        '-perm',
        '-readable',
        '-writable',
        '-executable',
        '-links',
        '-inum',
        '-samefile',
        '-regex',
        '-iregex',
        '-delete',
        '-print0',
        '-printf',
        '-ls',
        '-fls',
        '-exec',
        '-execdir',
        '-ok',
        '-okdir',
        '-prune',
        '-quit',
    }
)


# --- File operations ---


def _is_heredoc_cat(command: SimpleCommand) -> bool:
    return any(redirect.operator in ('<<', '<<-') for redirect in command.redirects)


def _is_tail_with_line_offset(parsed: ParsedCommand, command: SimpleCommand) -> bool:
    """The whole command line is ``tail -N <file>``."""
    if len(parsed.entries) != 1 or parsed.entries[0].pipeline.commands != (command,):
        return False
    args = command.literal_args
    return (
        len(args) == 2
        and args[0] is not None
        and _LINE_OFFSET_RE.match(args[0]) is not None
        and args[1] is not None
        and not args[1].startswith('-')
        and not command.redirects
    )


def _banned_file_operations(parsed: ParsedCommand) -> list[str]:
    commands = list(iter_simple_commands(parsed))
    found = []
    for name in FILE_OPERATION_COMMANDS:
        invocations = [command for command in commands if command.literal_name == name]
        if not invocations:
            continue
        if name == 'cat' and all(_is_heredoc_cat(command) for command in invocations):
            continue
        if name == 'tail' and len(invocations) == 1 and _is_tail_with_line_offset(parsed, invocations[0]):
            continue
        found.append(name)
    return found


def _banned_file_operations_from_text(command: str) -> list[str]:
    found = [name for name in FILE_OPERATION_COMMANDS if re.search(rf'\b{name}\b', command)]
    if 'cat' in found and _CAT_HEREDOC_RE.search(command):
        return []
    if found == ['tail'] and _TAIL_OFFSET_RE.match(command):
        return []
    return found


@rule(
    name='ban-file-operation-commands',
    config_key='banFileOperationCommands',
    description='Use the Read, Edit and Write tools instead of cat, sed, head, tail or awk',
)
def ban_file_operation_commands(ctx: RuleContext) -> RuleResult:
    if not ctx.command:
        return PASS

    parsed = ctx.parsed
    if isinstance(parsed, Unparsable):
        found = _banned_file_operations_from_text(ctx.command)
        note = ['(Note: the command could not be parsed, so this was detected by text matching)']
    else:
        found = _banned_file_operations(parsed)
        note = []
    if not found:
        return PASS

    return violation(
        '❌ Using bash commands (cat, sed, head, tail, awk) for file operations is not allowed',
        f'Found: {", ".join(found)}',
        'Please use the dedicated tools instead:',
        '  - Read tool: for reading files (supports offset/limit for specific line ranges)',
        '  - Edit tool: for editing files (instead of sed/awk)',
        '  - Write tool: for creating files (instead of cat/echo redirection)',
        '  - Grep tool: for searching file contents (instead of grep)',
        'Exceptions: cat with heredoc (cat <<EOF), tail with negative offset and filename only (tail -100 file)',
        *note,
    )


# --- grep / rg ---


def grep_has_unsupported_flags(args: Sequence[str | None]) -> bool:
    """True if any flag falls outside what the Grep tool supports.

    Short flags may be clustered (``-rni``); a value-taking short flag ends
    the cluster, and takes the next argument when it is last (``-A 3``).
    """
    i = 0
    while i < len(args):
        arg = args[i]
        i += 1
        if arg is None:
            continue
        if arg == '--':
            break
        if arg.startswith('--'):
            flag, has_value, _ = arg.partition('=')
            if flag not in _GREP_LONG_FLAGS:
                return True
            if not has_value and flag in _GREP_LONG_FLAGS_WITH_VALUE:
                i += 1
        elif arg.startswith('-') and len(arg) > 1:
            letters = arg[1:]
            for j, letter in enumerate(letters):
                flag = f'-{letter}'
                if flag not in _GREP_SHORT_FLAGS:
                    return True
                if flag in _GREP_SHORT_FLAGS_WITH_VALUE:
                    if j + 1 == len(letters):
                        i += 1
                    break
    return False


@rule(
    name='ban-grep-command',
    config_key='banGrepCommand',
    description='Use the Grep tool instead of grep or rg to search file contents',
)
def ban_grep_command(ctx: RuleContext) -> RuleResult:
    if not ctx.command:
        return PASS
    for name in ('grep', 'rg'):
        for _command, args in literal_arguments_of(ctx.parsed, name):
            if not grep_has_unsupported_flags(args):
                return violation(
                    f'❌ Using {name} to search file contents is not allowed',
                    'Use the builtin Grep tool instead, which runs ripgrep with correct permissions and access.',
                    'The Grep tool supports: regex patterns, glob/type filtering, context lines, match counts, '
                    'and file-only output.',
                )
    return PASS


# --- find ---


@rule(
    name='ban-find-command',
    config_key='banFindCommand',
    description='Use the Glob tool instead of find to search for files by name',
)
def ban_find_command(ctx: RuleContext) -> RuleResult:
    if not ctx.command:
        return PASS
    for _command, args in literal_arguments_of(ctx.parsed, 'find'):
        if not FIND_UNSUPPORTED_FLAGS.intersection(arg for arg in args if arg is not None):
            return violation(
                '❌ Using find to search for files by name is not allowed',
                'Use the builtin Glob tool instead, which supports recursive glob patterns like "**/*.ts".',
            )
    return PASS


@rule(
    name='ban-find-delete',
    config_key='banFindDelete',
    description='Disallow find -delete; find files with Glob and remove them explicitly',
)
def ban_find_delete(ctx: RuleContext) -> RuleResult:
    if not ctx.command:
        return PASS
    for _command, args in literal_arguments_of(ctx.parsed, 'find'):
        if '-delete' in args:
            return violation(
                '❌ find -delete is not allowed',
                'Use the Glob tool to find files by pattern, then remove them explicitly with rm.',
            )
    return PASS


@rule(
    name='ban-find-exec',
    config_key='banFindExec',
    description='Disallow find -exec and its variants',
)
def ban_find_exec(ctx: RuleContext) -> RuleResult:
    if not ctx.command:
        return PASS
    for _command, args in literal_arguments_of(ctx.parsed, 'find'):
        action = find_exec(args)
        if action is None:
            continue
        if action.target is not None and PurePosixPath(action.target).name == 'grep':
            return violation(
                f'❌ find {action.flag} grep is not allowed',
                'Use rg (ripgrep) or the Grep tool instead, which recursively search directories by default.',
            )
        return violation(
            f'❌ find {action.flag} is not allowed',
            'Use the Glob tool to find files by pattern, and the Grep tool to search file contents.',
        )
    return PASS


# --- ls ---


@rule(
    name='ban-ls-command',
    config_key='banLsCommand',
    description='Use the Glob tool instead of a bare ls to list files',
)
def ban_ls_command(ctx: RuleContext) -> RuleResult:
    if not ctx.command:
        return PASS
    for _command, args in literal_arguments_of(ctx.parsed, 'ls'):
        if not any(arg is not None and arg.startswith('-') for arg in args):
            return violation(
                '❌ Using ls to list files is not allowed',
                'Use the builtin Glob tool instead (e.g. pattern "dir/*" to list directory contents).',
                'If you need detailed file info (permissions, sizes, etc.), use ls with flags like -la.',
            )
    return PASS
