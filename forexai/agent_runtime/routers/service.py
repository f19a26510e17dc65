"""Service metadata endpoints: descriptor, health and model catalog."""

from __future__ import annotations

from datetime import UTC, datetime
from importlib.metadata import PackageNotFoundError, version

from fastapi import APIRouter

from forexai.agent_runtime.deps import Catalog
from forexai.agent_runtime.models.catalog import DEFAULT_MODEL, MODEL_CATALOG

router = APIRouter(tags=["service"])

SERVICE_NAME = "ForexAI Agent Runtime"
FRAMEWORK = "pydantic-ai"


def _service_version() -> str:
    try:
        return version("forexai")
    except PackageNotFoundError:
        return "0.0.0"


@router.get("/")
async def handle_root(catalog: Catalog) -> dict:
    return {
        "name": SERVICE_NAME,
        "version": _service_version(),
        "status": "running",
        "framework": FRAMEWORK,
        "agents": catalog.names(),
        "defaultAgent": catalog.default,
        "endpoints": {
            "health": "GET /ping",
            "models": "GET /models",
            "invoke": "POST /invocations",
            "analyze": "POST /analyze (SSE)",
            "plan": "POST /plan",
            "history": "GET /history?sessionId=",
            "clearHistory": "DELETE /history?sessionId=",
            "sessions": "GET /sessions",
        },
    }


@router.get("/ping")
async def handle_ping() -> dict[str, str]:
    return {
        "status": "Healthy",
        "timestamp": datetime.now(tz=UTC).isoformat(),
        "framework": FRAMEWORK,
    }


@router.get("/models")
async def handle_models() -> dict:
    return {
        "models": [info.model_dump(mode="json") for info in MODEL_CATALOG.values()],
        "default": DEFAULT_MODEL.value,
    }
