"""Service configuration loaded from FOREX_* environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ForexSettings(BaseSettings):
    """ForexAI Agent Runtime settings.

    All fields are read from environment variables with the ``FOREX_`` prefix.
    For example, ``FOREX_LOG_LEVEL=DEBUG`` maps to ``log_level``.

    LLM provider keys (OPENAI_API_KEY, GEMINI_API_KEY, ...) are **not**
    managed here -- pydantic-ai reads them directly from the environment
    when a model is first used.
    """

    model_config = SettingsConfigDict(
        env_prefix="FOREX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    # -- Infrastructure --------------------------------------------------------
    database_url: str | None = None
    """PostgreSQL connection string (psycopg).  Required by ``save_daily_plan``."""

    redis_url: str | None = None
    """Redis connection string.  When set, session history lives in Redis."""

    # -- Sessions --------------------------------------------------------------
    session_history_limit: int = Field(default=50, ge=1)
    """Maximum number of messages kept per session (oldest dropped first)."""

    default_agent: str = "analyst"
    """Agent used by ``/invocations`` and ``/analyze`` when ``agentType`` is omitted."""

    # -- Models ----------------------------------------------------------------
    orchestrator_model: str = "openai:gpt-5-mini"
    analyst_model: str = "openai:gpt-5-mini"
    executor_model: str = "openai:gpt-5-mini"
    synthesizer_model: str = "openai:gpt-5-mini"
    planner_fast_model: str = "openai:gpt-5-nano"
    """Used by the chart-capture and persistence stages of the daily planner."""

    planner_pro_model: str = "openai:gpt-5-mini"
    """Used by the strategy-analysis stage (large strategy documents)."""

    # -- Browser automation ----------------------------------------------------
    browser_command: str = "npx"
    browser_args: list[str] = Field(default_factory=lambda: ["@playwright/mcp@latest"])
    browser_headless: bool = True
    browser_user_data_dir: str | None = None
    """Persistent Chromium profile (cookies accepted, charts configured)."""

    browser_timeout: float = 30.0
    """Seconds to wait for the browser server to start."""

    # -- Server ----------------------------------------------------------------
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8090
    graceful_shutdown_timeout: int = 600
    """Seconds to wait for in-flight invocations to finish during shutdown.

    Note: uvicorn's ``--timeout-graceful-shutdown`` must be >= this value
    for the wait to be effective.
    """

    # -- Helpers ---------------------------------------------------------------

    def resolved_browser_args(self) -> list[str]:
        """Return the browser server arguments with profile/headless flags applied."""
        args = list(self.browser_args)
        if self.browser_headless and "--headless" not in args:
            args.append("--headless")
        if self.browser_user_data_dir and "--user-data-dir" not in args:
            args.extend(["--user-data-dir", self.browser_user_data_dir])
        return args


def get_settings() -> ForexSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call, then returns
    the same object.  Call ``_get_settings_cached.cache_clear()`` in tests to
    force a re-read after overriding env vars.
    """
    return _get_settings_cached()


def _get_settings_cached() -> ForexSettings:
    """Inner function wrapped by lru_cache (allows type-safe cache_clear)."""
    return ForexSettings()


# Apply lru_cache at runtime so the function is only called once.
from functools import lru_cache  # noqa: E402

_get_settings_cached = lru_cache(maxsize=1)(_get_settings_cached)
