"""API request / response schemas.

Field names follow the public wire format (``sessionId``, ``agentType``)
through aliases; Python code uses snake_case.  Request models reject
missing or non-string input so that invalid requests never reach the
pipeline runner.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictStr
from pydantic.alias_generators import to_camel

from forexai.agent_runtime.models.enums import EventType, MessageRole

DEFAULT_PLAN_SESSION_ID = "daily-plan-session"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Invocations
# ---------------------------------------------------------------------------


class InvocationRequest(_CamelModel):
    """Body of ``POST /invocations`` and ``POST /analyze``."""

    message: StrictStr = Field(min_length=1)
    session_id: StrictStr = Field(default_factory=lambda: uuid.uuid4().hex, min_length=1)
    agent_type: StrictStr | None = None


class InvocationResponse(_CamelModel):
    type: EventType = EventType.RESULT
    content: str
    session_id: str


# ---------------------------------------------------------------------------
# Daily planner
# ---------------------------------------------------------------------------


class PlanRequest(_CamelModel):
    """Body of ``POST /plan``.  Keys are snake_case on the wire except ``sessionId``."""

    strategy_pdf_text: StrictStr = Field(min_length=1, alias="strategy_pdf_text")
    broker_url: StrictStr = Field(min_length=1, alias="broker_url")
    session_id: StrictStr = Field(default=DEFAULT_PLAN_SESSION_ID, min_length=1)


class PlanResponse(BaseModel):
    status: str = "success"
    result: str


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


class HistoryMessage(_CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    role: MessageRole
    content: str
    timestamp: datetime
    session_id: str


class HistoryResponse(_CamelModel):
    session_id: str
    messages: list[HistoryMessage]


class ClearResponse(_CamelModel):
    cleared: int
    session_id: str | None = None


class SessionListResponse(_CamelModel):
    sessions: list[str]
