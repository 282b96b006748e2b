"""Bash command analysis: parsing, structural queries, per-tool argument extraction."""

from __future__ import annotations

from policy_lib.shell.facts import (
    CHAIN_OPERATORS,
    absolute_literals_under,
    first_piped_filter_command,
    has_top_level_separator,
    invoked_command_names,
    iter_simple_commands,
    leading_change_directory_target,
    literal_arguments_of,
)
from policy_lib.shell.model import ParsedCommand, SimpleCommand, Unparsable, Word
from policy_lib.shell.parser import BashParseError, parse

__all__ = [
    'CHAIN_OPERATORS',
    'BashParseError',
    'ParsedCommand',
    'SimpleCommand',
    'Unparsable',
    'Word',
    'absolute_literals_under',
    'first_piped_filter_command',
    'has_top_level_separator',
    'invoked_command_names',
    'iter_simple_commands',
    'leading_change_directory_target',
    'literal_arguments_of',
    'parse',
]
