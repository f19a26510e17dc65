"""HTTP tests for the service, invocation, history and planner endpoints."""

from __future__ import annotations

import json

import pytest
from httpx import AsyncClient

from forexai.agent_runtime.models.enums import MessageRole
from forexai.agent_runtime.registry import InvocationRegistry
from forexai.agent_runtime.store.memory import MemorySessionStore


def _sse_events(body: str) -> list[dict]:
    """Parse the ``data:`` lines of an SSE body into event dicts."""
    return [json.loads(line.removeprefix("data:").strip()) for line in body.splitlines() if line.startswith("data:")]


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


async def test_ping(client: AsyncClient) -> None:
    resp = await client.get("/ping")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "Healthy"
    assert data["framework"] == "pydantic-ai"
    assert data["timestamp"]


async def test_root_descriptor(client: AsyncClient) -> None:
    data = (await client.get("/")).json()
    assert data["status"] == "running"
    assert data["defaultAgent"] == "analyst"
    assert "planner" in data["agents"]
    assert data["endpoints"]["analyze"].startswith("POST /analyze")


async def test_models(client: AsyncClient) -> None:
    data = (await client.get("/models")).json()
    names = [m["name"] for m in data["models"]]
    assert data["default"] == "gpt-5-mini"
    assert "gpt-5-nano" in names
    assert len(names) == 8


# ---------------------------------------------------------------------------
# /invocations
# ---------------------------------------------------------------------------


async def test_invocation_result(client: AsyncClient, store: MemorySessionStore) -> None:
    resp = await client.post("/invocations", json={"message": "Analyze EURUSD", "sessionId": "s1"})

    assert resp.status_code == 200
    assert resp.json() == {"type": "result", "content": "echo: Analyze EURUSD", "sessionId": "s1"}
    history = await store.history("s1")
    assert [(m.role, m.content) for m in history] == [
        (MessageRole.USER, "Analyze EURUSD"),
        (MessageRole.ASSISTANT, "echo: Analyze EURUSD"),
    ]


async def test_invocation_generates_session_id(client: AsyncClient) -> None:
    resp = await client.post("/invocations", json={"message": "hello"})

    assert resp.status_code == 200
    assert len(resp.json()["sessionId"]) == 32


async def test_invocation_pipeline_error(client: AsyncClient) -> None:
    resp = await client.post("/invocations", json={"message": "hi", "sessionId": "s1", "agentType": "broken"})

    assert resp.status_code == 500
    assert resp.json()["error"] == "upstream model unavailable"


@pytest.mark.parametrize(
    "body",
    [{}, {"message": ""}, {"message": 42}, {"message": None}, {"message": "hi", "sessionId": ""}],
)
async def test_invocation_validation(client: AsyncClient, store: MemorySessionStore, body: dict) -> None:
    resp = await client.post("/invocations", json=body)

    assert resp.status_code == 400
    assert resp.json()["error"]
    assert await store.session_ids() == []


async def test_invocation_unknown_agent(client: AsyncClient, store: MemorySessionStore) -> None:
    resp = await client.post("/invocations", json={"message": "hi", "agentType": "nope"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "Unknown agent type 'nope'"}
    assert await store.session_ids() == []


async def test_invocation_refused_during_shutdown(client: AsyncClient, registry: InvocationRegistry) -> None:
    registry.begin_shutdown()

    resp = await client.post("/invocations", json={"message": "hi"})

    assert resp.status_code == 503


async def test_invocation_store_failure_is_reported(
    client: AsyncClient, store: MemorySessionStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def _down(session_id: str) -> None:
        raise ConnectionError("redis down")

    monkeypatch.setattr(store, "create_if_absent", _down)

    resp = await client.post("/invocations", json={"message": "hi", "sessionId": "s1"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "redis down", "sessionId": "s1"}


# ---------------------------------------------------------------------------
# /analyze (SSE)
# ---------------------------------------------------------------------------


async def test_analyze_streams_events(client: AsyncClient) -> None:
    resp = await client.post("/analyze", json={"message": "Analyze EURUSD", "sessionId": "s1"})

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")
    events = _sse_events(resp.text)
    types = [e["type"] for e in events]
    assert types[0] == "connected"
    assert types[-2:] == ["result", "done"]
    assert events[-2]["content"] == "echo: Analyze EURUSD"
    assert all(e["sessionId"] == "s1" for e in events)


async def test_analyze_error_event(client: AsyncClient) -> None:
    resp = await client.post("/analyze", json={"message": "hi", "sessionId": "s1", "agentType": "broken"})

    events = _sse_events(resp.text)
    assert [e["type"] for e in events][-2:] == ["error", "done"]
    assert events[-2]["message"] == "upstream model unavailable"


async def test_analyze_validation(client: AsyncClient) -> None:
    resp = await client.post("/analyze", json={"sessionId": "s1"})

    assert resp.status_code == 400
    assert "message" in resp.json()["error"]


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


async def test_history_roundtrip(client: AsyncClient) -> None:
    await client.post("/invocations", json={"message": "first", "sessionId": "s1"})

    resp = await client.get("/history", params={"sessionId": "s1"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["sessionId"] == "s1"
    assert [(m["role"], m["content"]) for m in data["messages"]] == [
        ("user", "first"),
        ("assistant", "echo: first"),
    ]
    assert data["messages"][0]["sessionId"] == "s1"


async def test_history_unknown_session(client: AsyncClient) -> None:
    resp = await client.get("/history", params={"sessionId": "missing"})
    assert resp.status_code == 404


async def test_clear_history(client: AsyncClient) -> None:
    for sid in ("a", "b", "c"):
        await client.post("/invocations", json={"message": "x", "sessionId": sid})

    assert (await client.get("/sessions")).json() == {"sessions": ["a", "b", "c"]}

    resp = await client.delete("/history", params={"sessionId": "a"})
    assert resp.json() == {"cleared": 1, "sessionId": "a"}
    assert (await client.delete("/history", params={"sessionId": "a"})).status_code == 404

    resp = await client.delete("/history")
    assert resp.json() == {"cleared": 2, "sessionId": None}
    assert (await client.get("/sessions")).json() == {"sessions": []}


# ---------------------------------------------------------------------------
# /plan
# ---------------------------------------------------------------------------


async def test_plan_runs_planner(client: AsyncClient, store: MemorySessionStore) -> None:
    body = {"strategy_pdf_text": "Trade with the trend.", "broker_url": "https://broker.example"}

    resp = await client.post("/plan", json=body)

    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "success"
    assert data["result"].startswith("echo: ")
    assert await store.session_ids() == ["daily-plan-session"]


async def test_plan_refused_during_shutdown(
    client: AsyncClient, store: MemorySessionStore, registry: InvocationRegistry
) -> None:
    registry.begin_shutdown()

    resp = await client.post("/plan", json={"strategy_pdf_text": "rules", "broker_url": "https://broker.example"})

    assert resp.status_code == 503
    assert await store.session_ids() == []


@pytest.mark.parametrize(
    "body",
    [
        {"broker_url": "https://broker.example"},
        {"strategy_pdf_text": "rules"},
        {"strategy_pdf_text": "", "broker_url": "https://broker.example"},
    ],
)
async def test_plan_validation(client: AsyncClient, store: MemorySessionStore, body: dict) -> None:
    resp = await client.post("/plan", json=body)

    assert resp.status_code == 400
    assert resp.json()["error"]
    assert await store.session_ids() == []
