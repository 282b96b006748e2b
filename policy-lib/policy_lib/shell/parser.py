"""Parse Bash command strings into the structural model.

bashlex does the grammar work: operators, quoting, substitutions and
here-documents. This module converts its node tree into ``model`` types.

bashlex word nodes carry the quote-removed text (``word``) plus child nodes
for expansions, but not the quoting structure. To recover it, each word's
source span is rescanned for quote state, with the child spans spliced in as
substitution and parameter parts. When child spans don't line up with the
source (bashlex position bookkeeping is best-effort), the word falls back to
a coarse split: the expansions alone, which still makes ``literal_value``
report None correctly.

``parse()`` never raises for bad input. Syntax errors, unsupported
constructs (bashlex raises ``NotImplementedError`` for arithmetic expansion
and ``case``), empty commands and null bytes all come back as ``Unparsable``.
"""

from __future__ import annotations

__all__ = [
    'BashParseError',
    'parse',
]

import logging
from collections.abc import Sequence
from dataclasses import replace

import bashlex
import bashlex.ast

from policy_lib.library_boundary import LibraryBoundary
from policy_lib.shell.model import (
    CommandSubstitutionPart,
    CommandUnit,
    CompoundCommand,
    DoubleQuotedPart,
    Entry,
    LiteralPart,
    ParameterPart,
    ParsedCommand,
    Pipeline,
    Redirect,
    SimpleCommand,
    SingleQuotedPart,
    Unparsable,
    Word,
    WordPart,
)

logger = logging.getLogger(__name__)

_COMMAND_KINDS = frozenset({'list', 'pipeline', 'command', 'compound', 'if', 'for', 'while', 'until', 'function'})


class BashParseError(Exception):
    """bashlex rejected the command or failed while parsing it."""


def parse(command: str) -> ParsedCommand | Unparsable:
    """Parse a full Bash command line. Deterministic and side-effect free."""
    if not command.strip():
        return Unparsable(text=command, reason='empty command')
    if '\x00' in command:
        return Unparsable(text=command, reason='command contains a null byte')

    try:
        with LibraryBoundary(BashParseError):
            nodes = bashlex.parse(command)
            return _Converter(command).command(nodes, 0, len(command))
    except BashParseError as exc:
        logger.debug('bashlex could not parse %r: %s', command, exc)
        return Unparsable(text=command, reason=str(exc))


class _Converter:
    def __init__(self, source: str) -> None:
        self._source = source

    def _text(self, node: bashlex.ast.node) -> str:
        start, end = node.pos
        return self._source[start:end]

    # -- Command structure --

    def command(self, nodes: Sequence[bashlex.ast.node], start: int, end: int) -> ParsedCommand:
        """Convert a sequence of sibling nodes into entries.

        Siblings are either list parts (with operator nodes between them) or
        bashlex's top-level results, one per newline-separated line.
        """
        entries: list[Entry] = []
        for node in nodes:
            if node.kind == 'operator':
                if entries:
                    entries[-1] = replace(entries[-1], separator=node.op)
                continue
            if node.kind not in _COMMAND_KINDS:
                continue
            if entries and entries[-1].separator is None:
                entries[-1] = replace(entries[-1], separator='\n')
            entries.extend(self._entries(node))
        return ParsedCommand(entries=tuple(entries), text=self._source[start:end])

    def _entries(self, node: bashlex.ast.node) -> list[Entry]:
        if node.kind != 'list':
            return [Entry(pipeline=self._pipeline(node), separator=None)]

        start, end = node.pos
        return list(self.command(node.parts, start, end).entries)

    def _pipeline(self, node: bashlex.ast.node) -> Pipeline:
        if node.kind == 'pipeline':
            units = tuple(self._unit(part) for part in node.parts if part.kind in _COMMAND_KINDS)
        else:
            units = (self._unit(node),)
        return Pipeline(commands=units, text=self._text(node))

    def _unit(self, node: bashlex.ast.node) -> CommandUnit:
        match node.kind:
            case 'command':
                return self._simple(node)
            case 'compound':
                return self._compound(node)
            case _:
                return self._control(node)

    def _simple(self, node: bashlex.ast.node) -> SimpleCommand:
        assignments: list[Word] = []
        words: list[Word] = []
        redirects: list[Redirect] = []
        for part in node.parts:
            match part.kind:
                case 'assignment' if not words:
                    assignments.append(self._word(part))
                case 'word' | 'assignment':
                    words.append(self._word(part))
                case 'redirect':
                    redirects.append(self._redirect(part))
                case other:
                    logger.debug('Ignoring %s node in simple command %r', other, self._text(node))

        return SimpleCommand(
            text=self._text(node),
            assignments=tuple(assignments),
            name=words[0] if words else None,
            args=tuple(words[1:]),
            redirects=tuple(redirects),
        )

    def _compound(self, node: bashlex.ast.node) -> CompoundCommand:
        opener = next((part.word for part in node.list if part.kind == 'reservedword'), '')
        start, end = node.pos
        return CompoundCommand(
            kind='subshell' if opener == '(' else 'group',
            text=self._text(node),
            body=self.command(node.list, start, end),
            header=(),
            redirects=tuple(self._redirect(redirect) for redirect in getattr(node, 'redirects', None) or ()),
        )

    def _control(self, node: bashlex.ast.node) -> CompoundCommand:
        """``if``, ``for``, ``while``, ``until`` and function definitions."""
        parts: Sequence[bashlex.ast.node] = getattr(node, 'parts', None) or ()
        start, end = node.pos
        return CompoundCommand(
            kind=node.kind,
            text=self._text(node),
            body=self.command(parts, start, end),
            header=tuple(self._word(part) for part in parts if part.kind == 'word'),
            redirects=tuple(self._redirect(redirect) for redirect in getattr(node, 'redirects', None) or ()),
        )

    def _redirect(self, node: bashlex.ast.node) -> Redirect:
        output = node.output
        heredoc = getattr(node, 'heredoc', None)
        return Redirect(
            operator=node.type,
            target=None if isinstance(output, int) else self._word(output),
            heredoc=getattr(heredoc, 'value', None),
            text=self._text(node),
        )

    # -- Words --

    def _word(self, node: bashlex.ast.node) -> Word:
        return Word(text=self._text(node), parts=self._word_parts(node))

    def _word_parts(self, node: bashlex.ast.node) -> tuple[WordPart, ...]:
        start, end = node.pos
        children = sorted(getattr(node, 'parts', None) or (), key=lambda child: child.pos[0])
        if self._spans_line_up(children, start, end):
            parts = _WordSplitter(self, children).split(start, end)
            if parts is not None:
                return parts

        logger.debug('Falling back to coarse word split for %r', self._text(node))
        expansions = [self._child_part(child) for child in children if child.kind != 'tilde']
        if not expansions:
            return (LiteralPart(node.word),)
        return tuple(expansions)

    def _spans_line_up(self, children: Sequence[bashlex.ast.node], start: int, end: int) -> bool:
        cursor = start
        for child in children:
            child_start, child_end = child.pos
            if child_start < cursor or child_end > end or child_start >= child_end:
                return False
            if self._source[child_start] not in '$`~<>':
                return False
            cursor = child_end
        return True

    def _child_part(self, child: bashlex.ast.node) -> WordPart:
        text = self._text(child)
        match child.kind:
            case 'tilde':
                return LiteralPart(text)
            case 'commandsubstitution' | 'processsubstitution':
                start, end = child.pos
                inner = getattr(child, 'command', None)
                command = (
                    self.command([inner], start, end)
                    if inner is not None
                    else ParsedCommand(entries=(), text='')
                )
                if child.kind == 'processsubstitution':
                    style = 'process'
                elif text.startswith('`'):
                    style = 'backtick'
                else:
                    style = 'dollar'
                return CommandSubstitutionPart(command=command, style=style, text=text)
            case _:
                return ParameterPart(text)


class _WordSplitter:
    """Rescan a word's source span for quote state.

    Returns None from ``split()`` when a child expansion lands inside single
    quotes, which means the spans can't be trusted.
    """

    def __init__(self, converter: _Converter, children: Sequence[bashlex.ast.node]) -> None:
        self._converter = converter
        self._source = converter._source
        self._children = {child.pos[0]: child for child in children}
        self._parts: list[WordPart] = []
        self._quoted: list[WordPart] | None = None
        self._buffer: list[str] = []

    def _flush(self) -> None:
        if self._buffer:
            target = self._parts if self._quoted is None else self._quoted
            target.append(LiteralPart(''.join(self._buffer)))
            self._buffer.clear()

    def _close_quote(self, quoted: list[WordPart]) -> None:
        self._flush()
        self._parts.append(DoubleQuotedPart(tuple(quoted)))
        self._quoted = None

    def split(self, start: int, end: int) -> tuple[WordPart, ...] | None:
        source = self._source
        consumed = 0
        i = start
        while i < end:
            child = self._children.get(i)
            if child is not None:
                self._flush()
                target = self._parts if self._quoted is None else self._quoted
                target.append(self._converter._child_part(child))
                consumed += 1
                i = child.pos[1]
                continue

            char = source[i]
            if self._quoted is not None:
                if char == '"':
                    self._close_quote(self._quoted)
                    i += 1
                elif char == '\\' and i + 1 < end and source[i + 1] in '$`"\\\n':
                    if source[i + 1] != '\n':
                        self._buffer.append(source[i + 1])
                    i += 2
                else:
                    self._buffer.append(char)
                    i += 1
            elif char == '\\' and i + 1 < end:
                if source[i + 1] != '\n':
                    self._buffer.append(source[i + 1])
                i += 2
            elif char == "'" or (char == '$' and source[i + 1 : i + 2] == "'"):
                opening = i + 1 if char == "'" else i + 2
                closing = self._closing_single_quote(opening, end, ansi_c=char == '$')
                if any(opening <= position < closing for position in self._children):
                    return None
                self._flush()
                self._parts.append(SingleQuotedPart(source[opening:closing]))
                i = closing + 1
            elif char == '"':
                self._flush()
                self._quoted = []
                i += 1
            else:
                self._buffer.append(char)
                i += 1

        if self._quoted is not None:
            self._close_quote(self._quoted)
        self._flush()
        if consumed != len(self._children):
            return None
        return tuple(self._parts)

    def _closing_single_quote(self, opening: int, end: int, *, ansi_c: bool) -> int:
        i = opening
        while i < end:
            if ansi_c and self._source[i] == '\\':
                i += 2
                continue
            if self._source[i] == "'":
                return i
            i += 1
        return end
