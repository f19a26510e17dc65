"""Data models for the agent runtime."""

from forexai.agent_runtime.models.agent import AgentNode, AgentSpec, DailyPlan, SequentialAgentSpec
from forexai.agent_runtime.models.api import (
    ClearResponse,
    HistoryMessage,
    HistoryResponse,
    InvocationRequest,
    InvocationResponse,
    PlanRequest,
    PlanResponse,
    SessionListResponse,
)
from forexai.agent_runtime.models.catalog import DEFAULT_MODEL, MODEL_CATALOG, ModelInfo, ModelName
from forexai.agent_runtime.models.enums import (
    EventType,
    MarketBias,
    MessageRole,
    RunState,
    ToolState,
    ToolStatus,
)
from forexai.agent_runtime.models.events import PipelineEvent
from forexai.agent_runtime.models.session import ConversationMessage, SessionState, render_messages

__all__ = [
    # Catalog
    "DEFAULT_MODEL",
    "MODEL_CATALOG",
    # Agents
    "AgentNode",
    "AgentSpec",
    # API schemas
    "ClearResponse",
    # Session
    "ConversationMessage",
    "DailyPlan",
    # Enums
    "EventType",
    "HistoryMessage",
    "HistoryResponse",
    "InvocationRequest",
    "InvocationResponse",
    "MarketBias",
    "MessageRole",
    "ModelInfo",
    "ModelName",
    # Events
    "PipelineEvent",
    "PlanRequest",
    "PlanResponse",
    "RunState",
    "SequentialAgentSpec",
    "SessionListResponse",
    "SessionState",
    "ToolState",
    "ToolStatus",
    "render_messages",
]
