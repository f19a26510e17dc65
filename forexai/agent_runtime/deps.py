"""FastAPI dependency injection for lifespan-scoped resources.

Usage in route handlers::

    @router.post("/invocations")
    async def invoke(body: InvocationRequest, runner: Runner, catalog: Catalog) -> InvocationResponse:
        ...

Every resource is created in the app lifespan and stored on ``app.state``.
Dependencies raise HTTP 503 if the lifespan has not (or no longer) set them.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from forexai.agent_runtime.agents.catalog import AgentCatalog
from forexai.agent_runtime.execution.runner import PipelineRunner
from forexai.agent_runtime.registry import InvocationRegistry
from forexai.agent_runtime.settings import ForexSettings, get_settings
from forexai.agent_runtime.store.base import SessionStore


def _state_or_503(request: Request, attr: str, label: str) -> object:
    value = getattr(request.app.state, attr, None)
    if value is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} not initialised.",
        )
    return value


def get_runner(request: Request) -> PipelineRunner:
    """Return the shared pipeline runner."""
    return _state_or_503(request, "runner", "Pipeline runner")  # type: ignore[return-value]


def get_session_store(request: Request) -> SessionStore:
    """Return the session store the runner writes to."""
    return _state_or_503(request, "session_store", "Session store")  # type: ignore[return-value]


def get_catalog(request: Request) -> AgentCatalog:
    return _state_or_503(request, "catalog", "Agent catalog")  # type: ignore[return-value]


def get_registry(request: Request) -> InvocationRegistry:
    return _state_or_503(request, "registry", "Invocation registry")  # type: ignore[return-value]


def get_app_settings(request: Request) -> ForexSettings:
    """Settings stored by the lifespan, falling back to the cached environment read."""
    return getattr(request.app.state, "settings", None) or get_settings()


# -- Annotated type aliases for concise route signatures ---------------------

Runner = Annotated[PipelineRunner, Depends(get_runner)]
"""Annotated dependency: shared PipelineRunner."""

Store = Annotated[SessionStore, Depends(get_session_store)]
"""Annotated dependency: session history store."""

Catalog = Annotated[AgentCatalog, Depends(get_catalog)]
"""Annotated dependency: agent catalog."""

Settings = Annotated[ForexSettings, Depends(get_app_settings)]

Registry = Annotated[InvocationRegistry, Depends(get_registry)]


def refuse_if_shutting_down(registry: InvocationRegistry) -> None:
    """Answer 503 once the registry stops accepting invocations."""
    if registry.is_shutting_down:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service is shutting down.")
