"""Structural model of a parsed Bash command line.

The parser (``parser.py``) converts bashlex's loosely-typed node tree into
these frozen dataclasses so rules never touch bashlex directly. Every node
keeps the source text it was parsed from, which lets rules quote commands
back to the agent exactly as written.

Words keep their quoting structure. ``"hello world"`` is one word with a
single ``DoubleQuotedPart``; ``$(ls)`` is a ``CommandSubstitutionPart``
holding a fully parsed nested command. A word's ``literal_value`` is its
text after quote removal, or ``None`` when any part expands at runtime.
"""

from __future__ import annotations

__all__ = [
    'CommandSubstitutionPart',
    'CommandUnit',
    'CompoundCommand',
    'DoubleQuotedPart',
    'Entry',
    'LiteralPart',
    'ParameterPart',
    'ParsedCommand',
    'Pipeline',
    'Redirect',
    'SimpleCommand',
    'SingleQuotedPart',
    'Unparsable',
    'Word',
    'WordPart',
]

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Literal

# --- Word parts ---


@dataclass(frozen=True, slots=True)
class LiteralPart:
    """Unquoted text, with backslash escapes already resolved."""

    text: str


@dataclass(frozen=True, slots=True)
class SingleQuotedPart:
    text: str


@dataclass(frozen=True, slots=True)
class DoubleQuotedPart:
    parts: tuple[WordPart, ...]


@dataclass(frozen=True, slots=True)
class CommandSubstitutionPart:
    """``$(...)``, backticks, or ``<(...)``/``>(...)`` process substitution."""

    command: ParsedCommand
    style: Literal['dollar', 'backtick', 'process']
    text: str


@dataclass(frozen=True, slots=True)
class ParameterPart:
    """Parameter expansion (``$HOME``, ``${x:-y}``). Opaque: value unknown until runtime."""

    text: str


type WordPart = LiteralPart | SingleQuotedPart | DoubleQuotedPart | CommandSubstitutionPart | ParameterPart


def _literal_value(parts: tuple[WordPart, ...]) -> str | None:
    pieces: list[str] = []
    for part in parts:
        match part:
            case LiteralPart(text=text) | SingleQuotedPart(text=text):
                pieces.append(text)
            case DoubleQuotedPart(parts=inner):
                value = _literal_value(inner)
                if value is None:
                    return None
                pieces.append(value)
            case CommandSubstitutionPart() | ParameterPart():
                return None
    return ''.join(pieces)


@dataclass(frozen=True, slots=True)
class Word:
    text: str
    parts: tuple[WordPart, ...]

    @property
    def literal_value(self) -> str | None:
        return _literal_value(self.parts)


# --- Commands ---


@dataclass(frozen=True, slots=True)
class Redirect:
    """A redirection such as ``> out.txt``, ``2>&1`` or ``<<EOF``.

    ``target`` is None for file-descriptor duplication (``2>&1``).
    ``heredoc`` holds the here-document body for ``<<`` and ``<<-``.
    """

    operator: str
    target: Word | None
    heredoc: str | None
    text: str


@dataclass(frozen=True, slots=True)
class SimpleCommand:
    text: str
    assignments: tuple[Word, ...]
    name: Word | None
    args: tuple[Word, ...]
    redirects: tuple[Redirect, ...]

    @property
    def literal_name(self) -> str | None:
        return self.name.literal_value if self.name is not None else None

    @property
    def literal_args(self) -> tuple[str | None, ...]:
        return tuple(arg.literal_value for arg in self.args)

    def words(self) -> Iterator[Word]:
        """Every word in the command, including assignments and redirect targets."""
        yield from self.assignments
        if self.name is not None:
            yield self.name
        yield from self.args
        for redirect in self.redirects:
            if redirect.target is not None:
                yield redirect.target


@dataclass(frozen=True, slots=True)
class CompoundCommand:
    """Subshell, brace group, or control structure (``if``, ``for``, ``function``...).

    ``words`` are the words of the construct's own header, such as the item
    list of a ``for`` loop or a function's name.
    """

    kind: str
    text: str
    body: ParsedCommand
    header: tuple[Word, ...]
    redirects: tuple[Redirect, ...]

    def words(self) -> Iterator[Word]:
        yield from self.header
        for redirect in self.redirects:
            if redirect.target is not None:
                yield redirect.target


type CommandUnit = SimpleCommand | CompoundCommand


@dataclass(frozen=True, slots=True)
class Pipeline:
    commands: tuple[CommandUnit, ...]
    text: str


@dataclass(frozen=True, slots=True)
class Entry:
    """A pipeline and the operator joining it to the next entry.

    ``separator`` is one of ``&&``, ``||``, ``;``, ``&`` or a newline, and is
    None for the final entry.
    """

    pipeline: Pipeline
    separator: str | None


@dataclass(frozen=True, slots=True)
class ParsedCommand:
    entries: tuple[Entry, ...]
    text: str


@dataclass(frozen=True, slots=True)
class Unparsable:
    """A command bashlex could not parse. Rules fall back or pass."""

    text: str
    reason: str
