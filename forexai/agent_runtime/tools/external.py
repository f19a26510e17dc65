"""External tool servers (MCP over stdio).

An ``ExternalServerTool`` owns one pydantic-ai toolset backed by a
subprocess, typically the Playwright MCP browser server.  The connection is
process-wide: it is opened lazily on first use and shared by every agent
that declares the tool.

The server context is entered and exited inside a dedicated holder task.
MCP's stdio client runs on anyio task groups, which must be exited by the
task that entered them; the holder keeps that true even though ``connect``
runs in a request handler and ``close`` runs in the app lifespan.

Lifecycle::

    uninitialized --connect--> connecting --ok--> ready --close--> closed
                                   |                                  |
                                   +--error--> uninitialized <-connect+
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Mapping, Sequence
from typing import Any

from loguru import logger
from pydantic_ai.toolsets import AbstractToolset

from forexai.agent_runtime.errors import ToolConnectionError
from forexai.agent_runtime.log import TOOL_SERVER_LOG_LEVEL, tool_server_log_handler
from forexai.agent_runtime.models.enums import ToolState


class ExternalServerTool:
    """Handle to an external process exposing many tools."""

    def __init__(self, name: str, server: AbstractToolset[Any], *, descriptor: str | None = None) -> None:
        self.name = name
        self.descriptor = descriptor or name
        self._server = server
        self._state = ToolState.UNINITIALIZED
        self._lock = asyncio.Lock()
        self._holder: asyncio.Task[None] | None = None
        self._stop: asyncio.Event | None = None

    @classmethod
    def stdio(
        cls,
        name: str,
        command: str,
        args: Sequence[str] = (),
        *,
        timeout: float = 30.0,
        env: Mapping[str, str] | None = None,
    ) -> ExternalServerTool:
        """Build a tool backed by an MCP server launched as ``command args...``."""
        from pydantic_ai.mcp import MCPServerStdio

        server = MCPServerStdio(
            command,
            args=list(args),
            env=dict(env) if env else None,
            timeout=timeout,
            log_level=TOOL_SERVER_LOG_LEVEL,
            log_handler=tool_server_log_handler(name),
        )
        return cls(name, server, descriptor=" ".join([command, *args]))

    # -- State -----------------------------------------------------------------

    @property
    def state(self) -> ToolState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ToolState.READY

    @property
    def toolset(self) -> AbstractToolset[Any]:
        """The connected toolset, for handing to a pydantic-ai agent."""
        if not self.is_ready:
            raise ToolConnectionError(self.name, f"not connected (state={self._state})")
        return self._server

    # -- Lifecycle -------------------------------------------------------------

    async def connect(self) -> ExternalServerTool:
        """Start (or reuse) the server.  Idempotent.

        Raises ``ToolConnectionError`` if the server cannot be started; the
        tool is left ``uninitialized`` so a later call may retry.
        """
        async with self._lock:
            if self._state is ToolState.READY:
                return self

            self._state = ToolState.CONNECTING
            logger.info("Tool server {}: connecting ({})", self.name, self.descriptor)

            started: asyncio.Future[None] = asyncio.get_running_loop().create_future()
            self._stop = asyncio.Event()
            self._holder = asyncio.create_task(self._hold(started, self._stop), name=f"tool-server:{self.name}")

            try:
                await started
            except Exception as exc:
                self._state = ToolState.UNINITIALIZED
                self._holder = None
                self._stop = None
                logger.error("Tool server {}: connection failed: {}", self.name, exc)
                raise ToolConnectionError(self.name, str(exc) or type(exc).__name__) from exc

            self._state = ToolState.READY
            logger.info("Tool server {}: ready", self.name)
            return self

    async def close(self) -> None:
        """Stop the server.  Idempotent; a no-op unless the tool is ready.

        Transport errors during shutdown are logged, never raised.
        """
        async with self._lock:
            if self._state is not ToolState.READY:
                logger.debug("Tool server {}: close skipped (state={})", self.name, self._state)
                return

            holder, stop = self._holder, self._stop
            self._holder = None
            self._stop = None
            try:
                if stop is not None:
                    stop.set()
                if holder is not None:
                    await holder
            except Exception:
                logger.exception("Tool server {}: error while closing", self.name)
            finally:
                self._state = ToolState.CLOSED
                logger.info("Tool server {}: closed", self.name)

    async def _hold(self, started: asyncio.Future[None], stop: asyncio.Event) -> None:
        """Keep the server context open until ``stop`` is set."""
        try:
            async with self._server:
                started.set_result(None)
                await stop.wait()
        except Exception as exc:
            if not started.done():
                started.set_exception(exc)
                return
            raise
        finally:
            if not started.done():
                with contextlib.suppress(asyncio.InvalidStateError):
                    started.set_exception(ToolConnectionError(self.name, "server exited during startup"))
