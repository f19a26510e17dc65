"""Redis-backed session store.

Layout (with the default ``forexai`` prefix)::

    forexai:sessions              SET   of known session ids
    forexai:history:{session_id}  LIST  of ConversationMessage JSON, oldest first

``append`` pushes and trims in one MULTI/EXEC so the list never exceeds the
limit.  ``get`` returns a snapshot ``SessionState``; mutating it does not
write back.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from forexai.agent_runtime.models.enums import MessageRole
from forexai.agent_runtime.models.session import ConversationMessage, SessionState, render_messages
from forexai.agent_runtime.store.memory import DEFAULT_HISTORY_LIMIT

if TYPE_CHECKING:
    import redis.asyncio as aioredis


def _decode(value: bytes | str) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


class RedisSessionStore:
    """Redis implementation of the SessionStore protocol."""

    def __init__(
        self,
        client: aioredis.Redis,
        limit: int = DEFAULT_HISTORY_LIMIT,
        *,
        prefix: str = "forexai",
    ) -> None:
        if limit < 1:
            msg = f"History limit must be positive, got {limit}"
            raise ValueError(msg)
        self.limit = limit
        self._client = client
        self._prefix = prefix

    # -- Keys ------------------------------------------------------------------

    @property
    def _index_key(self) -> str:
        return f"{self._prefix}:sessions"

    def _history_key(self, session_id: str) -> str:
        return f"{self._prefix}:history:{session_id}"

    # -- Read ------------------------------------------------------------------

    async def _load(self, session_id: str) -> list[ConversationMessage]:
        raw = await self._client.lrange(self._history_key(session_id), 0, -1)
        return [ConversationMessage.model_validate_json(item) for item in raw]

    async def get(self, session_id: str) -> SessionState | None:
        if not await self._client.sismember(self._index_key, session_id):
            return None
        messages = await self._load(session_id)
        return SessionState.from_messages(session_id, self.limit, messages)

    async def history(self, session_id: str) -> list[ConversationMessage]:
        return await self._load(session_id)

    async def render_context(self, session_id: str) -> str:
        return render_messages(await self._load(session_id))

    async def session_ids(self) -> list[str]:
        members = await self._client.smembers(self._index_key)
        return sorted(_decode(m) for m in members)

    # -- Write -----------------------------------------------------------------

    async def create_if_absent(self, session_id: str) -> SessionState:
        added = await self._client.sadd(self._index_key, session_id)
        if added:
            logger.debug("Session store: created session {}", session_id)
            return SessionState(session_id=session_id, limit=self.limit)
        messages = await self._load(session_id)
        return SessionState.from_messages(session_id, self.limit, messages)

    async def append(self, session_id: str, role: MessageRole, content: str) -> ConversationMessage:
        message = ConversationMessage(role=role, content=content, session_id=session_id)
        key = self._history_key(session_id)
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.sadd(self._index_key, session_id)
            pipe.rpush(key, message.model_dump_json())
            pipe.ltrim(key, -self.limit, -1)
            await pipe.execute()
        return message

    # -- Admin -----------------------------------------------------------------

    async def clear(self, session_id: str) -> bool:
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.srem(self._index_key, session_id)
            pipe.delete(self._history_key(session_id))
            removed, _ = await pipe.execute()
        if removed:
            logger.info("Session store: cleared session {}", session_id)
        return bool(removed)

    async def clear_all(self) -> int:
        ids = await self.session_ids()
        keys = [self._history_key(sid) for sid in ids]
        await self._client.delete(self._index_key, *keys)
        logger.info("Session store: cleared {} sessions", len(ids))
        return len(ids)

    async def close(self) -> None:
        await self._client.aclose()
