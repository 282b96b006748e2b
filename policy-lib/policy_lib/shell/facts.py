"""Queries over a parsed command.

Every query accepts ``Unparsable`` and returns an empty result for it, so
rules only branch on parse failure where they have a textual fallback.

Queries descend into command substitutions, process substitutions,
subshells, brace groups and control structures. Text inside quotes is never
mistaken for a command: ``echo "cat file"`` invokes ``echo`` only.
"""

from __future__ import annotations

__all__ = [
    'CHAIN_OPERATORS',
    'absolute_literals_under',
    'first_piped_filter_command',
    'has_top_level_separator',
    'invoked_command_names',
    'iter_parsed',
    'iter_pipelines',
    'iter_simple_commands',
    'iter_words',
    'leading_change_directory_target',
    'literal_arguments_of',
]

import re
from collections.abc import Iterator, Set

from policy_lib.shell.model import (
    CommandSubstitutionPart,
    CompoundCommand,
    DoubleQuotedPart,
    LiteralPart,
    ParameterPart,
    ParsedCommand,
    Pipeline,
    SimpleCommand,
    SingleQuotedPart,
    Unparsable,
    Word,
    WordPart,
)

CHAIN_OPERATORS = frozenset({'&&', '||', ';', '\n'})

# Marks an expansion in a word's surface text; never part of a path.
_OPAQUE = '\x00'

# A path token starts at the word start or after whitespace, '=' or ':'
# (``--out=/abs``, ``PATH=/a:/b``).
_ABSOLUTE_PATH_RE = re.compile(r'(?:^|(?<=[\s=:]))(/[^\s\x00:]*)')


# --- Traversal ---


def iter_parsed(parsed: ParsedCommand | Unparsable) -> Iterator[ParsedCommand]:
    """Yield ``parsed`` and every command nested inside it, outermost first."""
    if isinstance(parsed, Unparsable):
        return
    yield parsed
    for entry in parsed.entries:
        for unit in entry.pipeline.commands:
            for word in unit.words():
                yield from _nested_in_parts(word.parts)
            if isinstance(unit, CompoundCommand):
                yield from iter_parsed(unit.body)


def _nested_in_parts(parts: tuple[WordPart, ...]) -> Iterator[ParsedCommand]:
    for part in parts:
        match part:
            case CommandSubstitutionPart(command=command):
                yield from iter_parsed(command)
            case DoubleQuotedPart(parts=inner):
                yield from _nested_in_parts(inner)


def iter_pipelines(parsed: ParsedCommand | Unparsable) -> Iterator[Pipeline]:
    for command in iter_parsed(parsed):
        for entry in command.entries:
            yield entry.pipeline


def iter_simple_commands(parsed: ParsedCommand | Unparsable) -> Iterator[SimpleCommand]:
    for pipeline in iter_pipelines(parsed):
        for unit in pipeline.commands:
            if isinstance(unit, SimpleCommand):
                yield unit


def iter_words(parsed: ParsedCommand | Unparsable) -> Iterator[Word]:
    for pipeline in iter_pipelines(parsed):
        for unit in pipeline.commands:
            yield from unit.words()


# --- Queries ---


def invoked_command_names(parsed: ParsedCommand | Unparsable) -> Set[str]:
    """Literal names of every command that would run, at any nesting depth."""
    return {name for command in iter_simple_commands(parsed) if (name := command.literal_name) is not None}


def has_top_level_separator(parsed: ParsedCommand | Unparsable, operators: Set[str] = CHAIN_OPERATORS) -> bool:
    """True if two top-level entries are joined by one of ``operators``.

    A trailing operator (``ls;``) joins nothing and doesn't count. Operators
    inside substitutions or subshells aren't top level.
    """
    if isinstance(parsed, Unparsable):
        return False
    return any(entry.separator in operators for entry in parsed.entries[:-1])


def literal_arguments_of(
    parsed: ParsedCommand | Unparsable, command_name: str
) -> list[tuple[SimpleCommand, tuple[str | None, ...]]]:
    """Each invocation of ``command_name`` with its argument literal values.

    Arguments that expand at runtime come back as None.
    """
    return [
        (command, command.literal_args)
        for command in iter_simple_commands(parsed)
        if command.literal_name == command_name
    ]


def leading_change_directory_target(parsed: ParsedCommand | Unparsable) -> str | None:
    """Target of a leading ``cd <dir>`` when it is the only ``cd`` at top level."""
    if isinstance(parsed, Unparsable) or not parsed.entries:
        return None

    first = parsed.entries[0].pipeline.commands
    if len(first) != 1 or not isinstance(first[0], SimpleCommand) or first[0].literal_name != 'cd':
        return None
    args = first[0].literal_args
    if len(args) != 1 or args[0] is None:
        return None

    for entry in parsed.entries[1:]:
        for unit in entry.pipeline.commands:
            if isinstance(unit, SimpleCommand) and unit.literal_name == 'cd':
                return None
    return args[0]


def first_piped_filter_command(parsed: ParsedCommand | Unparsable, filter_names: Set[str]) -> str | None:
    """Name of the first filter command receiving piped input, if any."""
    for pipeline in iter_pipelines(parsed):
        for unit in pipeline.commands[1:]:
            if isinstance(unit, SimpleCommand) and unit.literal_name in filter_names:
                return unit.literal_name
    return None


def absolute_literals_under(parsed: ParsedCommand | Unparsable, base_path: str) -> list[str]:
    """Absolute paths in literal word text that equal or sit below ``base_path``.

    Covers quoted text as well, but never text produced by an expansion.
    Comments are dropped by the parser and never scanned.
    """
    base = base_path.rstrip('/')
    if not base:
        return []

    found: list[str] = []
    for word in iter_words(parsed):
        for match in _ABSOLUTE_PATH_RE.finditer(_surface_text(word.parts)):
            path = match.group(1)
            if (path == base or path.startswith(base + '/')) and path not in found:
                found.append(path)
    return found


def _surface_text(parts: tuple[WordPart, ...]) -> str:
    pieces: list[str] = []
    for part in parts:
        match part:
            case LiteralPart(text=text) | SingleQuotedPart(text=text):
                pieces.append(text)
            case DoubleQuotedPart(parts=inner):
                pieces.append(_surface_text(inner))
            case CommandSubstitutionPart() | ParameterPart():
                pieces.append(_OPAQUE)
    return ''.join(pieces)
