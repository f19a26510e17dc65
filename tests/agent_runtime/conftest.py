"""Shared fixtures for agent-runtime tests.

Models are pydantic-ai ``FunctionModel`` / ``TestModel`` instances, so no
provider credentials or network access are needed.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel
from sse_starlette.sse import AppStatus

from forexai.agent_runtime.agents.catalog import AgentCatalog
from forexai.agent_runtime.app import app
from forexai.agent_runtime.execution.runner import PipelineRunner
from forexai.agent_runtime.models.agent import AgentSpec, SequentialAgentSpec
from forexai.agent_runtime.registry import InvocationRegistry
from forexai.agent_runtime.settings import ForexSettings
from forexai.agent_runtime.store.memory import MemorySessionStore


@pytest.fixture(autouse=True)
def _reset_sse_app_status() -> None:
    """sse-starlette keeps its exit flag on the class; reset it between event loops."""
    AppStatus.should_exit = False
    AppStatus.should_exit_event = None


@pytest.fixture
def store() -> MemorySessionStore:
    return MemorySessionStore(limit=10)


@pytest.fixture
def registry() -> InvocationRegistry:
    return InvocationRegistry()


@pytest.fixture
def runner(store: MemorySessionStore, registry: InvocationRegistry) -> PipelineRunner:
    return PipelineRunner(store, registry)


def _echo(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
    """Reply with ``echo: <last user prompt line>``."""
    prompt = ""
    for message in messages:
        for part in message.parts:
            if part.part_kind == "user-prompt":
                prompt = str(part.content)
    return ModelResponse(parts=[TextPart(f"echo: {prompt.splitlines()[-1] if prompt else ''}")])


def _fail(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
    msg = "upstream model unavailable"
    raise RuntimeError(msg)


@pytest.fixture
def catalog() -> AgentCatalog:
    """A catalog shaped like the real one, backed by deterministic models."""
    analyst = AgentSpec(name="Analyst Agent", model=FunctionModel(_echo), instructions="Analyze.")
    broken = AgentSpec(name="Broken Agent", model=FunctionModel(_fail), instructions="Fail.")
    planner = SequentialAgentSpec(
        name="DailyPlanner",
        sub_agents=(
            AgentSpec(name="ChartScraper", model=FunctionModel(_echo), instructions="Open {{ broker_url }}."),
            AgentSpec(name="StrategyAnalyst", model=FunctionModel(_echo), instructions="{{ strategy_pdf_text }}"),
        ),
    )
    return AgentCatalog(
        agents={"analyst": analyst, "broken": broken, "planner": planner},
        default="analyst",
    )


@pytest.fixture
async def client(
    runner: PipelineRunner,
    store: MemorySessionStore,
    registry: InvocationRegistry,
    catalog: AgentCatalog,
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client wired to the app with test resources.

    The app lifespan does NOT run under ``ASGITransport``, so state fields
    are pre-set here.
    """
    app.state.settings = ForexSettings()
    app.state.session_store = store
    app.state.registry = registry
    app.state.runner = runner
    app.state.catalog = catalog

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.state.runner = None
    app.state.catalog = None
    app.state.session_store = None
    app.state.registry = None
