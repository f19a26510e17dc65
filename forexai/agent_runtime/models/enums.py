"""Shared enumerations used across the agent runtime."""

from __future__ import annotations

from enum import StrEnum

# -- Conversation ------------------------------------------------------------


class MessageRole(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


# -- Invocation --------------------------------------------------------------


class RunState(StrEnum):
    """Lifecycle of a single pipeline invocation."""

    IDLE = "idle"
    SESSION_RESOLVED = "session_resolved"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


# -- Tools -------------------------------------------------------------------


class ToolState(StrEnum):
    """Connection lifecycle of an external tool server."""

    UNINITIALIZED = "uninitialized"
    CONNECTING = "connecting"
    READY = "ready"
    CLOSED = "closed"


class ToolStatus(StrEnum):
    """``status`` field of a tool result payload."""

    SUCCESS = "success"
    ERROR = "error"


# -- Trading -----------------------------------------------------------------


class MarketBias(StrEnum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"


# -- Events ------------------------------------------------------------------


class EventType(StrEnum):
    """Pipeline event types, in the order they may be emitted."""

    CONNECTED = "connected"
    PROCESSING = "processing"
    STEP = "step"
    RESULT = "result"
    ERROR = "error"
    DONE = "done"
