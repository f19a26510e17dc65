"""Session store interface.

The session store maps an opaque session id to a bounded, append-only
conversation history.  It is created in the app lifespan and injected into
the runner and the HTTP layer; tests build isolated instances.

The interface is async so that in-process and Redis backends are
interchangeable.  The store does no locking of its own: the pipeline runner
serialises invocations per session id.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from forexai.agent_runtime.models.enums import MessageRole
from forexai.agent_runtime.models.session import ConversationMessage, SessionState


@runtime_checkable
class SessionStore(Protocol):
    """Async protocol for per-session conversation history."""

    limit: int
    """Maximum number of messages retained per session."""

    async def get(self, session_id: str) -> SessionState | None:
        """Return the session state, or ``None`` if the id was never referenced."""
        ...

    async def create_if_absent(self, session_id: str) -> SessionState:
        """Return the session state, creating an empty one on first reference.

        Idempotent: existing history is never reset.
        """
        ...

    async def append(self, session_id: str, role: MessageRole, content: str) -> ConversationMessage:
        """Append a message, creating the session if needed and evicting the oldest past ``limit``."""
        ...

    async def history(self, session_id: str) -> list[ConversationMessage]:
        """Return stored messages in insertion order (empty if unknown)."""
        ...

    async def render_context(self, session_id: str) -> str:
        """Render history as ``role: content`` lines; ``""`` when there is none."""
        ...

    async def clear(self, session_id: str) -> bool:
        """Forget one session.  Returns ``False`` if it did not exist."""
        ...

    async def clear_all(self) -> int:
        """Forget every session.  Returns how many were removed."""
        ...

    async def session_ids(self) -> list[str]:
        """Return all known session ids."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        ...
