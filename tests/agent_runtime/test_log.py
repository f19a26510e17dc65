"""Tests for the loguru bridges (stdlib intercept and tool-server relay)."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
from loguru import logger
from mcp.types import LoggingMessageNotificationParams

from forexai.agent_runtime.log import _InterceptHandler, tool_server_log_handler


@pytest.fixture
def captured() -> Iterator[list[str]]:
    lines: list[str] = []
    sink_id = logger.add(lambda msg: lines.append(msg.rstrip("\n")), format="{level}|{function}|{message}")
    yield lines
    logger.remove(sink_id)


def test_stdlib_records_reach_loguru(captured: list[str]) -> None:
    stdlib_logger = logging.getLogger("forexai.tests.intercept")
    stdlib_logger.propagate = False
    handler = _InterceptHandler()
    stdlib_logger.addHandler(handler)
    try:
        stdlib_logger.warning("Stage %s: tool call %s", "ChartScraper", "browser_navigate")
    finally:
        stdlib_logger.removeHandler(handler)

    assert captured == ["WARNING|test_stdlib_records_reach_loguru|Stage ChartScraper: tool call browser_navigate"]


@pytest.mark.parametrize(
    ("mcp_level", "expected"),
    [("notice", "INFO"), ("warning", "WARNING"), ("alert", "CRITICAL"), ("emergency", "CRITICAL")],
)
async def test_tool_server_messages_mapped_to_loguru_levels(captured: list[str], mcp_level: str, expected: str) -> None:
    relay = tool_server_log_handler("playwright")

    await relay(LoggingMessageNotificationParams(level=mcp_level, logger="page", data="navigated"))

    level, _, message = captured[-1].split("|", 2)
    assert level == expected
    assert message == "Tool server playwright/page: navigated"


async def test_tool_server_message_without_logger_name(captured: list[str]) -> None:
    relay = tool_server_log_handler("playwright")

    await relay(LoggingMessageNotificationParams(level="error", data={"reason": "timeout"}))

    assert captured[-1].endswith("Tool server playwright: {'reason': 'timeout'}")
