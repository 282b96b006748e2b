"""Rule toggles: which config keys are enabled for this invocation.

The config file holds a single ``hooks`` setting::

    {"hooks": true}
    {"hooks": {"banCommandChaining": false, "logToolUse": true}}

An absent file, an absent ``hooks`` key, or ``true`` enables every key's
recommended default. An explicit map enables exactly the keys it sets to
``true``; keys it leaves out are disabled.
"""

from __future__ import annotations

__all__ = [
    'HooksSetting',
    'PolicyConfig',
    'load_config',
    'resolve_hooks',
]

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

import pydantic

from policy_lib import paths

logger = logging.getLogger(__name__)

type HooksSetting = Literal[True] | Mapping[str, bool] | None


class PolicyConfig(pydantic.BaseModel):
    """Config file schema. Other top-level keys belong to other tools and are ignored."""

    model_config = pydantic.ConfigDict(extra='ignore', strict=True, frozen=True)

    hooks: Literal[True] | dict[str, bool] | None = None


def load_config(path: Path | None = None) -> PolicyConfig:
    """Read the config file, or return an empty config when there is none.

    Raises:
        pydantic.ValidationError: The file is not valid JSON or doesn't match the schema.
    """
    path = path or paths.config_path()
    if not path.is_file():
        logger.debug('No config file at %s, using recommended defaults', path)
        return PolicyConfig()
    return PolicyConfig.model_validate_json(path.read_text(encoding='utf-8'))


def resolve_hooks(setting: HooksSetting, defaults: Mapping[str, bool]) -> dict[str, bool]:
    """Fully populated enable map over every key in ``defaults``.

    ``defaults`` maps each known config key to its recommended value.
    """
    if setting is None or setting is True:
        return dict(defaults)

    unknown = sorted(set(setting) - set(defaults))
    if unknown:
        logger.warning('Ignoring unknown hook config keys: %s', ', '.join(unknown))
    return {key: setting.get(key, False) for key in defaults}
