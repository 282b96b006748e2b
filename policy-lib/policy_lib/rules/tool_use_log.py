from __future__ import annotations

__all__ = ['log_tool_use']

from policy_lib import tool_log
from policy_lib.rules.base import PASS, RuleContext, RuleResult, SideEffect, rule
from policy_lib.schemas.tools import is_exempt_tool


@rule(
    name='log-tool-use',
    config_key='logToolUse',
    description='Log every tool invocation that can change the workspace',
)
def log_tool_use(ctx: RuleContext) -> RuleResult:
    if is_exempt_tool(ctx.tool_name):
        return PASS
    tool_log.log_tool_use(ctx.invocation)
    return SideEffect('logged tool use')
