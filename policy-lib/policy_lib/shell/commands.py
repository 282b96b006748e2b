"""Argument extraction for specific tools: git, cargo, yarn, find, grep, shells.

Each function looks at literal argument values only. An argument that
expands at runtime (None) never matches a flag, and stops extraction where a
later position depends on it.
"""

from __future__ import annotations

__all__ = [
    'FindExec',
    'FlagUse',
    'GitCheckoutBranch',
    'GitRemoteSetUrl',
    'cargo_manifest_path',
    'find_exec',
    'git_add_all_flag',
    'git_change_directory',
    'git_checkout_new_branch',
    'git_remote_set_url',
    'git_subcommand',
    'shell_minus_c',
    'yarn_cwd',
]

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import PurePosixPath

from policy_lib.shell.facts import iter_simple_commands, literal_arguments_of
from policy_lib.shell.model import ParsedCommand, SimpleCommand, Unparsable

type Args = tuple[str | None, ...]

# git global options that consume the following argument.
_GIT_OPTIONS_WITH_VALUE = frozenset(
    {'-C', '-c', '--git-dir', '--work-tree', '--namespace', '--config-env', '--super-prefix'}
)
_SHELLS = frozenset({'bash', 'sh'})
_SHELL_OPTIONS_WITH_VALUE = frozenset({'-o', '+o', '-O', '+O', '--rcfile', '--init-file'})
_FIND_EXEC_FLAGS = frozenset({'-exec', '-execdir', '-ok', '-okdir'})


@dataclass(frozen=True, slots=True)
class FlagUse:
    """A flag found on a command, with the command rebuilt without it."""

    command: SimpleCommand
    value: str | None
    command_without: str


@dataclass(frozen=True, slots=True)
class FindExec:
    flag: str
    target: str | None


@dataclass(frozen=True, slots=True)
class GitCheckoutBranch:
    new_branch: str
    start_point: str


@dataclass(frozen=True, slots=True)
class GitRemoteSetUrl:
    remote: str
    url: str


def _is_short_cluster(arg: str, letter: str) -> bool:
    """``-xCv`` style cluster of single-letter flags that includes ``letter``."""
    return arg.startswith('-') and not arg.startswith('--') and len(arg) > 2 and letter in arg[1:]


def _rebuild(command: SimpleCommand, replacements: Mapping[int, str | None]) -> str:
    """Command text with args replaced by index; None drops the argument."""
    words = [word.text for word in command.assignments]
    if command.name is not None:
        words.append(command.name.text)
    for index, arg in enumerate(command.args):
        if index not in replacements:
            words.append(arg.text)
        elif (replacement := replacements[index]) is not None:
            words.append(replacement)
    words.extend(redirect.text for redirect in command.redirects)
    return ' '.join(words)


# --- git ---


def git_subcommand(args: Args) -> tuple[int, str] | None:
    """Index and name of git's subcommand, skipping global options."""
    i = 0
    while i < len(args):
        arg = args[i]
        if arg is None:
            return None
        if arg in _GIT_OPTIONS_WITH_VALUE:
            i += 2
            continue
        if not arg.startswith('-'):
            return i, arg
        i += 1
    return None


def git_change_directory(parsed: ParsedCommand | Unparsable) -> FlagUse | None:
    """First ``git -C <path>`` (global option position only)."""
    for command, args in literal_arguments_of(parsed, 'git'):
        i = 0
        while i < len(args):
            arg = args[i]
            if arg is None:
                break
            if arg == '-C':
                path = args[i + 1] if i + 1 < len(args) else None
                return FlagUse(command, path, _rebuild(command, {i: None, i + 1: None}))
            if _is_short_cluster(arg, 'C'):
                path = args[i + 1] if i + 1 < len(args) else None
                remaining = arg.replace('C', '')
                replacements = {i: remaining if remaining != '-' else None, i + 1: None}
                return FlagUse(command, path, _rebuild(command, replacements))
            if arg in _GIT_OPTIONS_WITH_VALUE:
                i += 2
                continue
            if not arg.startswith('-'):
                break
            i += 1
    return None


def _git_subcommand_args(parsed: ParsedCommand | Unparsable, subcommand: str) -> list[Args]:
    found = []
    for _command, args in literal_arguments_of(parsed, 'git'):
        located = git_subcommand(args)
        if located is not None and located[1] == subcommand:
            found.append(args[located[0] + 1 :])
    return found


def git_add_all_flag(parsed: ParsedCommand | Unparsable) -> str | None:
    """The flag as written when ``git add`` stages everything."""
    for args in _git_subcommand_args(parsed, 'add'):
        for arg in args:
            if arg == '--':
                break
            if arg is None:
                continue
            if arg in ('-A', '--all', '--no-ignore-removal') or _is_short_cluster(arg, 'A'):
                return arg
    return None


def git_checkout_new_branch(parsed: ParsedCommand | Unparsable) -> GitCheckoutBranch | None:
    """``git checkout -b <new> <start>`` with an explicit start point."""
    for args in _git_subcommand_args(parsed, 'checkout'):
        if '-b' not in args and '-B' not in args:
            continue
        flag_index = args.index('-b') if '-b' in args else args.index('-B')
        positionals: list[str] = []
        for arg in args[flag_index + 1 :]:
            if arg is None or arg == '--':
                break
            if not arg.startswith('-'):
                positionals.append(arg)
        if len(positionals) >= 2:
            return GitCheckoutBranch(new_branch=positionals[0], start_point=positionals[1])
    return None


def git_remote_set_url(parsed: ParsedCommand | Unparsable) -> GitRemoteSetUrl | None:
    for args in _git_subcommand_args(parsed, 'remote'):
        positionals = [arg for arg in args if arg is not None and not arg.startswith('-')]
        if len(positionals) >= 3 and positionals[0] == 'set-url':
            return GitRemoteSetUrl(remote=positionals[1], url=positionals[2])
    return None


# --- cargo and yarn ---


def _option_with_value(parsed: ParsedCommand | Unparsable, command_name: str, option: str) -> FlagUse | None:
    """``<option> <value>`` or ``<option>=<value>``, before any ``--``."""
    for command, args in literal_arguments_of(parsed, command_name):
        for i, arg in enumerate(args):
            if arg == '--':
                break
            if arg == option:
                value = args[i + 1] if i + 1 < len(args) else None
                return FlagUse(command, value, _rebuild(command, {i: None, i + 1: None}))
            if arg is not None and arg.startswith(option + '='):
                return FlagUse(command, arg.removeprefix(option + '='), _rebuild(command, {i: None}))
    return None


def cargo_manifest_path(parsed: ParsedCommand | Unparsable) -> FlagUse | None:
    return _option_with_value(parsed, 'cargo', '--manifest-path')


def yarn_cwd(parsed: ParsedCommand | Unparsable) -> FlagUse | None:
    return _option_with_value(parsed, 'yarn', '--cwd')


# --- find ---


def find_exec(args: Sequence[str | None]) -> FindExec | None:
    """The first ``-exec``-style action in a find invocation and the command it runs."""
    for i, arg in enumerate(args):
        if arg in _FIND_EXEC_FLAGS:
            target = args[i + 1] if i + 1 < len(args) else None
            return FindExec(flag=arg, target=target)
    return None


# --- shells ---


def shell_minus_c(parsed: ParsedCommand | Unparsable) -> str | None:
    """Name of a ``bash``/``sh`` invocation that runs a ``-c`` command string."""
    for command in iter_simple_commands(parsed):
        name = command.literal_name
        if name is None or PurePosixPath(name).name not in _SHELLS:
            continue
        args = command.literal_args
        i = 0
        while i < len(args):
            arg = args[i]
            if arg is None:
                break
            if arg == '-c' or (arg.startswith('-') and not arg.startswith('--') and 'c' in arg[1:]):
                return name
            if arg in _SHELL_OPTIONS_WITH_VALUE:
                i += 2
                continue
            if not arg.startswith(('-', '+')):
                break
            i += 1
    return None
