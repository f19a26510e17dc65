"""Tool bindings an agent may declare.

``ToolBinding`` is the tagged union the runner dispatches on:

- ``FunctionTool``: typed function, validated input, never raises
- ``AgentTool``: another agent exposed as a function
- ``ExternalServerTool``: subprocess exposing many tools (MCP)
"""

from forexai.agent_runtime.tools.base import AgentTool, FunctionTool, failure, success
from forexai.agent_runtime.tools.external import ExternalServerTool
from forexai.agent_runtime.tools.plans import (
    SAVE_DAILY_PLAN,
    DailyPlanWriter,
    SaveDailyPlanInput,
    SqlDailyPlanWriter,
    UnconfiguredPlanWriter,
    build_save_daily_plan_tool,
)

ToolBinding = FunctionTool | AgentTool | ExternalServerTool

__all__ = [
    "SAVE_DAILY_PLAN",
    "AgentTool",
    "DailyPlanWriter",
    "ExternalServerTool",
    "FunctionTool",
    "SaveDailyPlanInput",
    "SqlDailyPlanWriter",
    "ToolBinding",
    "UnconfiguredPlanWriter",
    "build_save_daily_plan_tool",
    "failure",
    "success",
]
