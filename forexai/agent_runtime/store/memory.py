"""In-process session store.

Sessions live for the lifetime of the store (normally the process).  The
same ``SessionState`` object is handed out on every lookup, so callers see
appends made through the store immediately.
"""

from __future__ import annotations

from loguru import logger

from forexai.agent_runtime.models.enums import MessageRole
from forexai.agent_runtime.models.session import ConversationMessage, SessionState

DEFAULT_HISTORY_LIMIT = 50


class MemorySessionStore:
    """Dict-backed implementation of the SessionStore protocol."""

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 1:
            msg = f"History limit must be positive, got {limit}"
            raise ValueError(msg)
        self.limit = limit
        self._sessions: dict[str, SessionState] = {}

    # -- Read ------------------------------------------------------------------

    async def get(self, session_id: str) -> SessionState | None:
        return self._sessions.get(session_id)

    async def history(self, session_id: str) -> list[ConversationMessage]:
        state = self._sessions.get(session_id)
        return list(state.messages) if state else []

    async def render_context(self, session_id: str) -> str:
        state = self._sessions.get(session_id)
        return state.render() if state else ""

    async def session_ids(self) -> list[str]:
        return list(self._sessions)

    # -- Write -----------------------------------------------------------------

    async def create_if_absent(self, session_id: str) -> SessionState:
        state = self._sessions.get(session_id)
        if state is None:
            state = SessionState(session_id=session_id, limit=self.limit)
            self._sessions[session_id] = state
            logger.debug("Session store: created session {}", session_id)
        return state

    async def append(self, session_id: str, role: MessageRole, content: str) -> ConversationMessage:
        state = await self.create_if_absent(session_id)
        return state.append(role, content)

    # -- Admin -----------------------------------------------------------------

    async def clear(self, session_id: str) -> bool:
        removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info("Session store: cleared session {}", session_id)
        return removed

    async def clear_all(self) -> int:
        count = len(self._sessions)
        self._sessions.clear()
        logger.info("Session store: cleared {} sessions", count)
        return count

    async def close(self) -> None:
        self._sessions.clear()
