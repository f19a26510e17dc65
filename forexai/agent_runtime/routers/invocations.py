"""Invocation endpoints.

``POST /invocations`` drains the pipeline and answers with the final result;
``POST /analyze`` streams every ``PipelineEvent`` as server-sent events.
Both take the same body: ``{message, sessionId?, agentType?}``.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sse_starlette import EventSourceResponse, ServerSentEvent

from forexai.agent_runtime.deps import Catalog, Registry, Runner, refuse_if_shutting_down
from forexai.agent_runtime.models.api import InvocationRequest, InvocationResponse
from forexai.agent_runtime.models.enums import EventType
from forexai.agent_runtime.models.events import PipelineEvent

router = APIRouter(tags=["invocations"])


@router.post("/invocations", response_model=InvocationResponse)
async def handle_invoke(
    body: InvocationRequest,
    runner: Runner,
    catalog: Catalog,
    registry: Registry,
) -> InvocationResponse | JSONResponse:
    """Run the requested agent to completion and return its final text."""
    refuse_if_shutting_down(registry)
    agent = catalog.resolve(body.agent_type)

    result = await runner.invoke(agent, body.message, session_id=body.session_id)
    if not result.ok:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": result.error or "Agent returned no output", "sessionId": body.session_id},
        )
    return InvocationResponse(content=result.content, session_id=result.session_id)


async def _relay(queue: asyncio.Queue[PipelineEvent]) -> AsyncIterator[ServerSentEvent]:
    """Forward queued events as SSE frames until ``done``."""
    while True:
        event = await queue.get()
        yield ServerSentEvent(data=event.to_wire(), event=event.type.value)
        if event.type is EventType.DONE:
            return


@router.post("/analyze")
async def handle_analyze(
    body: InvocationRequest,
    runner: Runner,
    catalog: Catalog,
    registry: Registry,
) -> EventSourceResponse:
    """Run the requested agent, streaming progress as ``text/event-stream``.

    The pipeline runs detached from the connection: if the client goes away
    the invocation still completes and its result is kept in history.
    """
    refuse_if_shutting_down(registry)
    agent = catalog.resolve(body.agent_type)
    queue = runner.start(agent, body.message, session_id=body.session_id)
    return EventSourceResponse(_relay(queue))
