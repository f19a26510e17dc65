from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import AsyncExitStack, asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from sse_starlette.sse import AppStatus

from forexai.agent_runtime.agents.catalog import build_browser_tool, build_catalog
from forexai.agent_runtime.db.engine import create_engine, create_session_factory
from forexai.agent_runtime.errors import UnknownAgentError
from forexai.agent_runtime.execution.runner import PipelineRunner
from forexai.agent_runtime.log import setup_logging
from forexai.agent_runtime.registry import InvocationRegistry
from forexai.agent_runtime.settings import ForexSettings, get_settings
from forexai.agent_runtime.store.base import SessionStore
from forexai.agent_runtime.store.memory import MemorySessionStore
from forexai.agent_runtime.store.redis import RedisSessionStore
from forexai.agent_runtime.tools.plans import (
    DailyPlanWriter,
    SqlDailyPlanWriter,
    UnconfiguredPlanWriter,
    build_save_daily_plan_tool,
)


def _create_session_store(settings: ForexSettings) -> SessionStore:
    """Create the session store backend based on configuration."""
    if settings.redis_url:
        client = aioredis.from_url(
            settings.redis_url,
            decode_responses=False,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
        )
        logger.info("Session store: redis (limit={})", settings.session_history_limit)
        return RedisSessionStore(client, settings.session_history_limit)
    logger.info("Session store: memory (limit={})", settings.session_history_limit)
    return MemorySessionStore(settings.session_history_limit)


def _quietly(label: str, close: Callable[[], Awaitable[object]]) -> Callable[[], Awaitable[None]]:
    """Wrap a shutdown callback so its failure is logged instead of raised."""

    async def _run() -> None:
        try:
            await close()
        except Exception:
            logger.exception("{}: error during shutdown", label)
        else:
            logger.info("{}: closed", label)

    return _run


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # -- Startup ---------------------------------------------------------------
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("Agent Runtime starting (host={}, port={})", settings.host, settings.port)

    _app.state.settings = settings
    _app.state.db_engine = None

    # Callbacks run in reverse order of registration on exit: browser, store, DB.
    async with AsyncExitStack() as stack:
        # -- Database ----------------------------------------------------------
        writer: DailyPlanWriter
        if settings.database_url:
            engine = create_engine(settings.database_url)
            _app.state.db_engine = engine
            stack.push_async_callback(_quietly("PostgreSQL", engine.dispose))
            writer = SqlDailyPlanWriter(create_session_factory(engine))
            logger.info("PostgreSQL: connected (pool_size=2, max_overflow=3)")
        else:
            writer = UnconfiguredPlanWriter()
            logger.warning("FOREX_DATABASE_URL not set -- save_daily_plan will report failures")

        # -- Session store -----------------------------------------------------
        store = _create_session_store(settings)
        stack.push_async_callback(_quietly("Session store", store.close))

        # -- Browser tool server (connected lazily on first use) ---------------
        browser = build_browser_tool(settings)
        stack.push_async_callback(browser.close)

        # -- Runner + agents ---------------------------------------------------
        registry = InvocationRegistry()
        runner = PipelineRunner(store, registry)
        catalog = build_catalog(
            settings,
            runner=runner,
            browser=browser,
            save_plan=build_save_daily_plan_tool(writer),
        )
        _app.state.session_store = store
        _app.state.registry = registry
        _app.state.runner = runner
        _app.state.catalog = catalog
        logger.info("Agents: {} (default={})", ", ".join(catalog.names()), catalog.default)

        try:
            yield
        finally:
            # -- Shutdown ------------------------------------------------------
            logger.info("Agent Runtime shutting down (active_invocations={})", registry.active_count)

            # 1. Stop accepting new invocations.
            registry.begin_shutdown()

            # 2. Wait for in-flight invocations to complete naturally.
            if registry.active_count > 0:
                timeout = settings.graceful_shutdown_timeout
                logger.info("Waiting for {} invocations to finish (timeout={}s)...", registry.active_count, timeout)
                if not await registry.wait_until_drained(timeout=timeout):
                    logger.warning("Shutting down with {} invocations still running", registry.active_count)

            # 3. Signal SSE streams to close.  After the drain so that streams
            #    can deliver their terminal events first.
            AppStatus.should_exit = True
            logger.info("SSE: signalled streams to close")

            _app.state.runner = None
            _app.state.catalog = None


app = FastAPI(title="ForexAI Agent Runtime", lifespan=lifespan)


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


def _describe_request_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = [str(item) for item in error.get("loc", ()) if item not in ("body", "query")]
        where = ".".join(loc)
        parts.append(f"{where}: {error.get('msg')}" if where else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


@app.exception_handler(RequestValidationError)
async def handle_validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": _describe_request_error(exc)})


@app.exception_handler(UnknownAgentError)
async def handle_unknown_agent(_request: Request, exc: UnknownAgentError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from forexai.agent_runtime.routers.history import router as history_router  # noqa: E402
from forexai.agent_runtime.routers.invocations import router as invocations_router  # noqa: E402
from forexai.agent_runtime.routers.planner import router as planner_router  # noqa: E402
from forexai.agent_runtime.routers.service import router as service_router  # noqa: E402

app.include_router(service_router)
app.include_router(invocations_router)
app.include_router(history_router)
app.include_router(planner_router)
