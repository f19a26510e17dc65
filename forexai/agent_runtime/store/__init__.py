from forexai.agent_runtime.store.base import SessionStore
from forexai.agent_runtime.store.memory import MemorySessionStore
from forexai.agent_runtime.store.redis import RedisSessionStore

__all__ = ["MemorySessionStore", "RedisSessionStore", "SessionStore"]
