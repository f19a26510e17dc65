"""Conversation history endpoints.

Thin HTTP adapter over the session store.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from forexai.agent_runtime.deps import Store
from forexai.agent_runtime.models.api import ClearResponse, HistoryMessage, HistoryResponse, SessionListResponse

router = APIRouter(tags=["history"])


@router.get("/history", response_model=HistoryResponse)
async def handle_get_history(
    store: Store,
    session_id: str = Query(..., alias="sessionId", min_length=1, description="Session to read."),
) -> HistoryResponse:
    state = await store.get(session_id)
    if state is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"Session '{session_id}' not found.")
    messages = await store.history(session_id)
    return HistoryResponse(
        session_id=session_id,
        messages=[HistoryMessage.model_validate(m) for m in messages],
    )


@router.delete("/history", response_model=ClearResponse)
async def handle_clear_history(
    store: Store,
    session_id: str | None = Query(None, alias="sessionId", description="Session to clear; omit to clear all."),
) -> ClearResponse:
    if session_id is None:
        cleared = await store.clear_all()
        return ClearResponse(cleared=cleared)
    if not await store.clear(session_id):
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"Session '{session_id}' not found.")
    return ClearResponse(cleared=1, session_id=session_id)


@router.get("/sessions", response_model=SessionListResponse)
async def handle_list_sessions(store: Store) -> SessionListResponse:
    return SessionListResponse(sessions=await store.session_ids())
