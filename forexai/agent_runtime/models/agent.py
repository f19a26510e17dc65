"""Agent descriptors.

Descriptors are static values: they hold no connections and do no work.
The pipeline runner turns an ``AgentSpec`` into a pydantic-ai ``Agent`` at
invocation time, after every external tool server it declares is ready.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from forexai.agent_runtime.models.enums import MarketBias

if TYPE_CHECKING:
    from pydantic_ai.models import Model

    from forexai.agent_runtime.tools import ToolBinding


@dataclass(frozen=True)
class AgentSpec:
    """A single LLM agent: model + instructions + tool bindings."""

    name: str
    model: str | Model
    """Provider-qualified model name (``openai:gpt-5-mini``) or a model instance."""

    instructions: str
    """System prompt.  May contain Jinja2 placeholders filled from the RunContext."""

    tools: tuple[ToolBinding, ...] = ()
    output_type: type[Any] = str
    """``str`` for free text, or a pydantic model for structured output."""

    output_key: str | None = None
    """RunContext key the output is stored under (defaults to ``name``)."""

    include_history: bool = True
    """Prefix the rendered session history to the prompt."""

    description: str = ""

    @property
    def context_key(self) -> str:
        return self.output_key or self.name


@dataclass(frozen=True)
class SequentialAgentSpec:
    """A composite agent running its sub-agents in a fixed linear order."""

    name: str
    sub_agents: tuple[AgentSpec, ...] = field(default_factory=tuple)
    description: str = ""

    def __post_init__(self) -> None:
        if not self.sub_agents:
            msg = f"Sequential agent '{self.name}' needs at least one sub-agent"
            raise ValueError(msg)
        names = [a.name for a in self.sub_agents]
        if len(set(names)) != len(names):
            msg = f"Sequential agent '{self.name}' has duplicate stage names: {names}"
            raise ValueError(msg)


AgentNode = AgentSpec | SequentialAgentSpec


# -- Structured outputs -------------------------------------------------------


class DailyPlan(BaseModel):
    """Structured output of the strategy-analysis stage."""

    bias: MarketBias
    levels: list[float] = Field(description="Key support/resistance levels read from the chart")
    reasoning: str
