"""The rule catalog, in evaluation order.

``build_registry()`` is the single place that lists rules. Order matters:
the first violation wins, so more specific rules come before broader ones
(piping into ``grep`` is reported as a pipe, not as a grep search), and the
tool-use log runs last so only allowed invocations are logged.

Two config keys have no rule: ``logPrompts`` is read by the prompt hook and
``logReadOnlyToolUse`` by the pre-tool-use hook after an exempt allow.
"""

from __future__ import annotations

__all__ = [
    'EXTRA_CONFIG_ENTRIES',
    'ExtraConfigEntry',
    'RuleRegistry',
    'build_registry',
]

from collections.abc import Sequence
from dataclasses import dataclass

from policy_lib.rules import Phase, Rule
from policy_lib.rules.absolute_paths import ban_absolute_paths, ban_home_dir_absolute_paths
from policy_lib.rules.attribution import require_co_authorship_proof
from policy_lib.rules.file_tools import (
    ban_file_operation_commands,
    ban_find_command,
    ban_find_delete,
    ban_find_exec,
    ban_grep_command,
    ban_ls_command,
)
from policy_lib.rules.git import (
    ban_git_add_all,
    ban_git_c,
    ban_git_checkout_redundant_start_point,
    ban_git_commit_amend,
    ban_git_commit_no_verify,
    ban_git_remote_set_url,
)
from policy_lib.rules.package_managers import ban_cargo_manifest_path, ban_wrong_package_manager, ban_yarn_cwd
from policy_lib.rules.shell import ban_background_bash, ban_bash_minus_c, ban_command_chaining, ban_pipe_to_filter
from policy_lib.rules.tool_use_log import log_tool_use
from policy_lib.rules.web import ban_outdated_year_in_search, prefer_local_github_repo


@dataclass(frozen=True, slots=True)
class ExtraConfigEntry:
    """A config key consumed outside the evaluator."""

    config_key: str
    recommended: bool
    description: str


EXTRA_CONFIG_ENTRIES = (
    ExtraConfigEntry('logPrompts', True, 'Log submitted prompts'),
    ExtraConfigEntry('logReadOnlyToolUse', True, 'Log read-only tool invocations'),
)


class RuleRegistry:
    """Ordered rules plus every known config key.

    Raises:
        ValueError: Two entries share a config key.
    """

    def __init__(self, rules: Sequence[Rule], extra_entries: Sequence[ExtraConfigEntry] = ()) -> None:
        self._rules = tuple(rules)
        self._extra_entries = tuple(extra_entries)
        self._by_config_key = {rule.meta.config_key: rule for rule in self._rules}

        keys = [rule.meta.config_key for rule in self._rules] + [entry.config_key for entry in self._extra_entries]
        duplicates = sorted({key for key in keys if keys.count(key) > 1})
        if duplicates:
            raise ValueError(f'Duplicate config keys: {", ".join(duplicates)}')

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def by_config_key(self, config_key: str) -> Rule | None:
        return self._by_config_key.get(config_key)

    def in_phase(self, phase: Phase) -> list[Rule]:
        return [rule for rule in self._rules if rule.meta.phase == phase]

    @property
    def config_keys(self) -> tuple[str, ...]:
        return tuple(rule.meta.config_key for rule in self._rules) + tuple(
            entry.config_key for entry in self._extra_entries
        )

    def recommended_defaults(self) -> dict[str, bool]:
        defaults = {rule.meta.config_key: rule.meta.recommended for rule in self._rules}
        defaults.update((entry.config_key, entry.recommended) for entry in self._extra_entries)
        return defaults


def build_registry() -> RuleRegistry:
    return RuleRegistry(
        [
            # Pre-exit: also applies to read-only, internal and MCP tools
            ban_outdated_year_in_search,
            prefer_local_github_repo,
            # git
            ban_git_c,
            ban_git_add_all,
            ban_git_commit_amend,
            ban_git_commit_no_verify,
            ban_git_checkout_redundant_start_point,
            ban_git_remote_set_url,
            require_co_authorship_proof,
            # Package managers
            ban_cargo_manifest_path,
            ban_yarn_cwd,
            ban_wrong_package_manager,
            # Shell usage
            ban_background_bash,
            ban_bash_minus_c,
            ban_command_chaining,
            ban_pipe_to_filter,
            # Dedicated tools
            ban_file_operation_commands,
            ban_grep_command,
            ban_find_delete,
            ban_find_exec,
            ban_find_command,
            ban_ls_command,
            # Paths
            ban_absolute_paths,
            ban_home_dir_absolute_paths,
            log_tool_use,
        ],
        EXTRA_CONFIG_ENTRIES,
    )
