import click


@click.group()
def main() -> None:
    """ForexAI - LLM agent pipelines for forex analysis and daily planning."""


@main.command()
@click.option("--host", default=None, help="Bind host (default: from FOREX_HOST or 0.0.0.0).")
@click.option("--port", default=None, type=int, help="Bind port (default: from FOREX_PORT or 8090).")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload for development.")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the Agent Runtime server."""
    import uvicorn

    from forexai.agent_runtime.settings import ForexSettings

    settings = ForexSettings()

    uvicorn.run(
        "forexai.agent_runtime.app:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level="warning",  # uvicorn's own logging is intercepted by loguru
        # Drain timeout plus a buffer for post-drain cleanup (browser, store, DB).
        timeout_graceful_shutdown=settings.graceful_shutdown_timeout + 60,
    )


@main.command()
@click.option(
    "--strategy-file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=str),
    help="Text file containing the trading strategy rules.",
)
@click.option("--broker-url", required=True, help="Broker chart URL to capture.")
@click.option("--session-id", default="daily-plan-session", show_default=True, help="Session id for history.")
def plan(strategy_file: str, broker_url: str, session_id: str) -> None:
    """Run the daily planner once and print its result."""
    import asyncio

    from forexai.agent_runtime.log import setup_logging
    from forexai.agent_runtime.settings import ForexSettings

    settings = ForexSettings()
    setup_logging(settings.log_level)

    with open(strategy_file, encoding="utf-8") as f:
        strategy_text = f.read()

    result = asyncio.run(_run_plan(settings, strategy_text, broker_url, session_id))
    if not result.ok:
        raise click.ClickException(result.error or "Planner returned no output")
    click.echo(result.content)


async def _run_plan(settings, strategy_text: str, broker_url: str, session_id: str):
    """Build a one-shot runtime (store, browser, DB), run the planner, tear down."""
    from contextlib import AsyncExitStack

    from forexai.agent_runtime.agents.catalog import PLANNER, build_browser_tool, build_catalog
    from forexai.agent_runtime.db.engine import create_engine, create_session_factory
    from forexai.agent_runtime.execution.runner import PipelineRunner
    from forexai.agent_runtime.registry import InvocationRegistry
    from forexai.agent_runtime.routers.planner import MORNING_CHART_IMAGE, PLAN_TRIGGER
    from forexai.agent_runtime.store.memory import MemorySessionStore
    from forexai.agent_runtime.tools.plans import SqlDailyPlanWriter, UnconfiguredPlanWriter, build_save_daily_plan_tool

    async with AsyncExitStack() as stack:
        if settings.database_url:
            engine = create_engine(settings.database_url)
            stack.push_async_callback(engine.dispose)
            writer = SqlDailyPlanWriter(create_session_factory(engine))
        else:
            writer = UnconfiguredPlanWriter()

        browser = build_browser_tool(settings)
        stack.push_async_callback(browser.close)

        runner = PipelineRunner(MemorySessionStore(settings.session_history_limit), InvocationRegistry())
        catalog = build_catalog(settings, runner=runner, browser=browser, save_plan=build_save_daily_plan_tool(writer))
        context = {
            "strategy_pdf_text": strategy_text,
            "broker_url": broker_url,
            "morning_chart_image": MORNING_CHART_IMAGE,
        }
        return await runner.invoke(catalog.resolve(PLANNER), PLAN_TRIGGER, session_id=session_id, context=context)


# ---------------------------------------------------------------------------
# Database management
# ---------------------------------------------------------------------------


def _alembic_config():
    """Build an Alembic Config from the package's alembic.ini.

    Both alembic.ini and the alembic/ directory live inside the package,
    so this works whether running from source or from an installed package.
    """
    from pathlib import Path

    from alembic.config import Config

    ini_path = Path(__file__).parent / "agent_runtime" / "alembic.ini"
    return Config(str(ini_path))


@main.group()
def db() -> None:
    """Database migration commands for the daily_analysis table."""


@db.command()
@click.option("--revision", default="head", help="Target revision (default: head).")
def upgrade(revision: str) -> None:
    """Run database migrations forward."""
    from alembic import command

    command.upgrade(_alembic_config(), revision)
    click.echo(f"Database upgraded to {revision}.")


@db.command()
@click.option("--revision", default="-1", help="Target revision (default: -1, one step back).")
def downgrade(revision: str) -> None:
    """Roll back database migrations."""
    from alembic import command

    command.downgrade(_alembic_config(), revision)
    click.echo(f"Database downgraded to {revision}.")


@db.command()
def current() -> None:
    """Show current database revision."""
    from alembic import command

    command.current(_alembic_config(), verbose=True)


@db.command()
def history() -> None:
    """Show migration history."""
    from alembic import command

    command.history(_alembic_config(), verbose=True)


if __name__ == "__main__":
    main()
