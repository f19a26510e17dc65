"""Unit tests for environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from forexai.agent_runtime.settings import ForexSettings, _get_settings_cached, get_settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FOREX_PORT", raising=False)
    settings = ForexSettings(_env_file=None)

    assert settings.port == 8090
    assert settings.session_history_limit == 50
    assert settings.default_agent == "analyst"
    assert settings.planner_fast_model == "openai:gpt-5-nano"


def test_env_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FOREX_PORT", "9001")
    monkeypatch.setenv("FOREX_ANALYST_MODEL", "openai:gpt-4o")

    settings = ForexSettings(_env_file=None)

    assert settings.port == 9001
    assert settings.analyst_model == "openai:gpt-4o"


def test_history_limit_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        ForexSettings(_env_file=None, session_history_limit=0)


def test_browser_args() -> None:
    settings = ForexSettings(_env_file=None, browser_user_data_dir="/data/profile")
    assert settings.resolved_browser_args() == [
        "@playwright/mcp@latest",
        "--headless",
        "--user-data-dir",
        "/data/profile",
    ]

    headed = ForexSettings(_env_file=None, browser_headless=False)
    assert headed.resolved_browser_args() == ["@playwright/mcp@latest"]


def test_get_settings_is_cached() -> None:
    _get_settings_cached.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        _get_settings_cached.cache_clear()
