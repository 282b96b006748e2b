"""Centralized file paths for the policy hooks.

All persistent file locations in one place. Locations follow the XDG base
directory layout and are resolved on each call, so the environment a hook
runs with (or a test sets up) always wins.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

__all__ = [
    'APP_NAME',
    'collapse_home',
    'config_dir',
    'config_path',
    'data_dir',
    'log_path',
    'proof_path',
    'proofs_dir',
    'state_dir',
]

APP_NAME = 'claude-policy'

_PIN_RE = re.compile(r'^[a-f\d]{64}$')


def _xdg_dir(variable: str, fallback: str) -> Path:
    base = os.environ.get(variable)
    return (Path(base) if base else Path.home() / fallback) / APP_NAME


def config_dir() -> Path:
    return _xdg_dir('XDG_CONFIG_HOME', '.config')


def data_dir() -> Path:
    return _xdg_dir('XDG_DATA_HOME', '.local/share')


def state_dir() -> Path:
    return _xdg_dir('XDG_STATE_HOME', '.local/state')


def config_path() -> Path:
    """Rule toggle file. ``CLAUDE_POLICY_CONFIG`` overrides the default location."""
    override = os.environ.get('CLAUDE_POLICY_CONFIG')
    return Path(override) if override else config_dir() / 'config.json'


def log_path() -> Path:
    """Tool-use and prompt log. ``CLAUDE_POLICY_LOG_FILE`` overrides the default location."""
    override = os.environ.get('CLAUDE_POLICY_LOG_FILE')
    return Path(override) if override else state_dir() / 'hooks.log'


# Co-authorship proofs, one JSON file per PIN
def proofs_dir() -> Path:
    return data_dir() / 'co-authorship-proofs'


def proof_path(pin: str) -> Path:
    """Get the proof file path for a PIN.

    Raises:
        ValueError: If pin is not a lowercase SHA-256 hex digest.
    """
    if not _PIN_RE.match(pin):
        raise ValueError(f'Invalid co-authorship proof PIN: {pin}')
    return proofs_dir() / f'{pin}.json'


def collapse_home(path: Path) -> str:
    """Render ``path`` with the home directory shown as ``~``."""
    home = Path.home()
    if path == home:
        return '~'
    if path.is_relative_to(home):
        return f'~/{path.relative_to(home)}'
    return str(path)
