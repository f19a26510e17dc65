"""Agent catalog -- the named agents and pipelines the service exposes.

=============  =====================================================
agent type     pipeline
=============  =====================================================
``assistant``  orchestrator (analyst + executor as tools) -> synthesizer
``analyst``    analyst (browser tools)
``executor``   executor (browser tools)
``planner``    chart capture -> strategy analysis -> plan persistence
=============  =====================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from forexai.agent_runtime.agents.prompts import (
    ANALYST_PROMPT,
    CHART_CAPTURE_PROMPT,
    EXECUTOR_PROMPT,
    ORCHESTRATOR_PROMPT,
    PLAN_PERSISTER_PROMPT,
    STRATEGY_ANALYST_PROMPT,
    SYNTHESIZER_PROMPT,
)
from forexai.agent_runtime.errors import UnknownAgentError
from forexai.agent_runtime.models.agent import AgentNode, AgentSpec, DailyPlan, SequentialAgentSpec
from forexai.agent_runtime.tools.base import AgentTool
from forexai.agent_runtime.tools.external import ExternalServerTool

if TYPE_CHECKING:
    from forexai.agent_runtime.settings import ForexSettings
    from forexai.agent_runtime.tools.base import AgentRunner, FunctionTool

ASSISTANT = "assistant"
ANALYST = "analyst"
EXECUTOR = "executor"
PLANNER = "planner"

BROWSER_TOOL_NAME = "playwright"


@dataclass
class AgentCatalog:
    """Agent types addressable through the HTTP API."""

    agents: dict[str, AgentNode] = field(default_factory=dict)
    default: str = ANALYST

    def __post_init__(self) -> None:
        if self.default not in self.agents:
            raise UnknownAgentError(self.default)

    def resolve(self, agent_type: str | None = None) -> AgentNode:
        """Return the agent for *agent_type* (the default when ``None``)."""
        name = agent_type or self.default
        try:
            return self.agents[name]
        except KeyError:
            raise UnknownAgentError(name) from None

    @property
    def planner(self) -> AgentNode:
        return self.resolve(PLANNER)

    def names(self) -> list[str]:
        return list(self.agents)


def build_catalog(
    settings: ForexSettings,
    *,
    runner: AgentRunner,
    browser: ExternalServerTool,
    save_plan: FunctionTool,
) -> AgentCatalog:
    """Assemble every agent from settings and the shared tool bindings."""
    analyst = AgentSpec(
        name="Analyst Agent",
        model=settings.analyst_model,
        instructions=ANALYST_PROMPT,
        tools=(browser,),
        description="Analyzes forex charts and market conditions; returns bias, levels and a recommendation.",
    )
    executor = AgentSpec(
        name="Executor Agent",
        model=settings.executor_model,
        instructions=EXECUTOR_PROMPT,
        tools=(browser,),
        description="Drives the broker web platform: navigation, screenshots, BUY/SELL execution.",
    )
    orchestrator = AgentSpec(
        name="ForexAI Orchestrator",
        model=settings.orchestrator_model,
        instructions=ORCHESTRATOR_PROMPT,
        tools=(
            AgentTool(analyst, runner, name="analyst"),
            AgentTool(executor, runner, name="executor"),
        ),
        output_key="orchestration",
    )
    synthesizer = AgentSpec(
        name="Response Synthesizer",
        model=settings.synthesizer_model,
        instructions=SYNTHESIZER_PROMPT,
        output_key="synthesis",
        include_history=False,
    )
    assistant = SequentialAgentSpec(
        name="ForexAI Assistant",
        sub_agents=(orchestrator, synthesizer),
        description="Orchestrate -> analyze/execute -> synthesize.",
    )

    planner = SequentialAgentSpec(
        name="DailyPlanner",
        sub_agents=(
            AgentSpec(
                name="ChartScraper",
                model=settings.planner_fast_model,
                instructions=CHART_CAPTURE_PROMPT,
                tools=(browser,),
                output_key="chart_capture",
                include_history=False,
            ),
            AgentSpec(
                name="StrategyAnalyst",
                model=settings.planner_pro_model,
                instructions=STRATEGY_ANALYST_PROMPT,
                output_type=DailyPlan,
                output_key="daily_plan",
                include_history=False,
            ),
            AgentSpec(
                name="DBPersister",
                model=settings.planner_fast_model,
                instructions=PLAN_PERSISTER_PROMPT,
                tools=(save_plan,),
                output_key="persistence",
                include_history=False,
            ),
        ),
        description="Strict linear sequence to establish the daily trading bias.",
    )

    return AgentCatalog(
        agents={
            ASSISTANT: assistant,
            ANALYST: analyst,
            EXECUTOR: executor,
            PLANNER: planner,
        },
        default=settings.default_agent,
    )


def build_browser_tool(settings: ForexSettings) -> ExternalServerTool:
    """The Playwright MCP server shared by every browser-driving agent (not yet started)."""
    return ExternalServerTool.stdio(
        BROWSER_TOOL_NAME,
        settings.browser_command,
        settings.resolved_browser_args(),
        timeout=settings.browser_timeout,
    )
