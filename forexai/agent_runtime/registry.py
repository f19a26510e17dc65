"""In-process invocation registry.

Tracks pipeline invocations that are currently running so that shutdown can
wait for them to finish.  Ephemeral -- empty on process restart.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from forexai.agent_runtime.context import Invocation


class ShuttingDownError(RuntimeError):
    """Raised when attempting to start an invocation during shutdown."""

    def __init__(self) -> None:
        super().__init__("Service is shutting down; no new invocations are accepted")


class InvocationRegistry:
    """Registry of currently executing invocations.

    Provides a drain mechanism for graceful shutdown: ``wait_until_drained``
    blocks until every registered invocation has been unregistered.
    """

    def __init__(self) -> None:
        self._invocations: dict[str, Invocation] = {}
        self._drain_event = asyncio.Event()
        self._drain_event.set()  # Starts "drained".
        self._shutting_down = False

    # -- Mutation --------------------------------------------------------------

    def register(self, invocation: Invocation) -> None:
        """Register an invocation.  Raises ``ShuttingDownError`` if shutting down."""
        if self._shutting_down:
            raise ShuttingDownError
        logger.debug(
            "Registry: register invocation {} (session={}, agent={})",
            invocation.invocation_id,
            invocation.session_id,
            invocation.agent_name,
        )
        self._invocations[invocation.invocation_id] = invocation
        self._drain_event.clear()

    def unregister(self, invocation_id: str) -> Invocation | None:
        invocation = self._invocations.pop(invocation_id, None)
        if invocation:
            logger.debug("Registry: unregister invocation {} (state={})", invocation_id, invocation.state)
        if not self._invocations:
            self._drain_event.set()
        return invocation

    # -- Query -----------------------------------------------------------------

    def get(self, invocation_id: str) -> Invocation | None:
        return self._invocations.get(invocation_id)

    def by_session(self, session_id: str) -> list[Invocation]:
        """Return active invocations for a session (at most one while runs are serialised)."""
        return [i for i in self._invocations.values() if i.session_id == session_id]

    def all_invocations(self) -> list[Invocation]:
        return list(self._invocations.values())

    @property
    def active_count(self) -> int:
        return len(self._invocations)

    # -- Lifecycle -------------------------------------------------------------

    def begin_shutdown(self) -> None:
        """Refuse new registrations from now on."""
        self._shutting_down = True
        logger.info("Registry: shutdown initiated, refusing new invocations")
        if not self._invocations:
            self._drain_event.set()

    @property
    def is_shutting_down(self) -> bool:
        return self._shutting_down

    async def wait_until_drained(self, timeout: float | None = None) -> bool:
        """Wait until all invocations have been unregistered.

        Returns ``True`` if the registry is empty, ``False`` if *timeout*
        expired with invocations still active.
        """
        if not self._invocations:
            return True
        try:
            await asyncio.wait_for(self._drain_event.wait(), timeout=timeout)
        except TimeoutError:
            logger.warning(
                "Registry: drain timed out after {}s with {} invocations still active",
                timeout,
                len(self._invocations),
            )
            return False
        else:
            return True
