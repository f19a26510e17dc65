"""Pipeline event models.

One invocation emits, in order: ``connected``, zero or more ``processing`` /
``step``, exactly one of ``result`` / ``error``, then ``done``.  Events are
serialised with camelCase keys (``sessionId``) on the wire.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from forexai.agent_runtime.models.enums import EventType


class PipelineEvent(BaseModel):
    """Wire-format event sent over SSE."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    type: EventType
    session_id: str
    message: str | None = None
    content: str | None = None
    stage: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))

    # -- Constructors ----------------------------------------------------------

    @classmethod
    def connected(cls, session_id: str) -> PipelineEvent:
        return cls(type=EventType.CONNECTED, session_id=session_id)

    @classmethod
    def processing(cls, session_id: str, message: str, *, stage: str | None = None) -> PipelineEvent:
        return cls(type=EventType.PROCESSING, session_id=session_id, message=message, stage=stage)

    @classmethod
    def step(cls, session_id: str, content: str, *, stage: str | None = None) -> PipelineEvent:
        return cls(type=EventType.STEP, session_id=session_id, content=content, stage=stage)

    @classmethod
    def result(cls, session_id: str, content: str) -> PipelineEvent:
        return cls(type=EventType.RESULT, session_id=session_id, content=content)

    @classmethod
    def error(cls, session_id: str, message: str) -> PipelineEvent:
        return cls(type=EventType.ERROR, session_id=session_id, message=message)

    @classmethod
    def done(cls, session_id: str) -> PipelineEvent:
        return cls(type=EventType.DONE, session_id=session_id)

    # -- Serialisation ---------------------------------------------------------

    def to_wire(self) -> str:
        """JSON payload for an SSE ``data:`` line."""
        return self.model_dump_json(by_alias=True, exclude_none=True)
