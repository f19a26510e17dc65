"""Conversation session data models."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from forexai.agent_runtime.models.enums import MessageRole


class ConversationMessage(BaseModel):
    """A single history entry.  Never mutated after insertion."""

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: str
    session_id: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))

    def render(self) -> str:
        return f"{self.role.value}: {self.content}"


def render_messages(messages: Iterable[ConversationMessage]) -> str:
    """Render messages as ``role: content`` lines in insertion order."""
    return "\n".join(m.render() for m in messages)


@dataclass
class SessionState:
    """Bounded conversation history for one session id.

    ``messages`` is a ``deque`` with ``maxlen``: appending past the limit
    drops the oldest entry.
    """

    session_id: str
    limit: int
    messages: deque[ConversationMessage] = field(init=False)
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    def __post_init__(self) -> None:
        if self.limit < 1:
            msg = f"History limit must be positive, got {self.limit}"
            raise ValueError(msg)
        self.messages = deque(maxlen=self.limit)

    @classmethod
    def from_messages(
        cls, session_id: str, limit: int, messages: Iterable[ConversationMessage]
    ) -> SessionState:
        state = cls(session_id=session_id, limit=limit)
        state.messages.extend(messages)
        return state

    def append(self, role: MessageRole, content: str) -> ConversationMessage:
        message = ConversationMessage(role=role, content=content, session_id=self.session_id)
        self.messages.append(message)
        return message

    def render(self) -> str:
        return render_messages(self.messages)

    def __len__(self) -> int:
        return len(self.messages)
