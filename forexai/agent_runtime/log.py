"""Logging configuration using loguru.

Two feeds end up in the same loguru sink:

* stdlib logging (uvicorn, sqlalchemy, pydantic-ai, and the execution
  modules that log through ``logging.getLogger``), via ``_InterceptHandler``;
* log notifications sent by external tool servers over MCP (the browser),
  via ``tool_server_log_handler``.
"""

from __future__ import annotations

import inspect
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from mcp.types import LoggingMessageNotificationParams

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

_NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "mcp", "sqlalchemy.engine")

# MCP uses syslog severities; loguru has no notice/alert/emergency.
_MCP_LEVELS = {
    "debug": "DEBUG",
    "info": "INFO",
    "notice": "INFO",
    "warning": "WARNING",
    "error": "ERROR",
    "critical": "CRITICAL",
    "alert": "CRITICAL",
    "emergency": "CRITICAL",
}

TOOL_SERVER_LOG_LEVEL = "warning"
"""Minimum severity requested from external tool servers."""


def _loguru_level(record: logging.LogRecord) -> str | int:
    try:
        return logger.level(record.levelname).name
    except ValueError:
        return record.levelno


class _InterceptHandler(logging.Handler):
    """Hand stdlib records to loguru, attributed to the frame that logged them."""

    def emit(self, record: logging.LogRecord) -> None:
        frame, depth = inspect.currentframe(), 0
        while frame is not None and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(_loguru_level(record), record.getMessage())


def tool_server_log_handler(server: str) -> Callable[[LoggingMessageNotificationParams], Awaitable[None]]:
    """Build an MCP logging callback that relays *server*'s messages to loguru."""

    async def _relay(params: LoggingMessageNotificationParams) -> None:
        source = f"{server}/{params.logger}" if params.logger else server
        logger.log(_MCP_LEVELS.get(params.level, "INFO"), "Tool server {}: {}", source, params.data)

    return _relay


def setup_logging(level: str = "INFO") -> None:
    """Make loguru the only logging sink.

    Safe to call more than once (the CLI and the app lifespan both call it).
    """
    level = level.upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=_FORMAT)

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info("Logging initialised (level={})", level)
