"""Error kinds raised by the pipeline runner and tool bindings.

Request validation errors are FastAPI's ``RequestValidationError`` and never
reach this layer.  ``ToolExecutionError`` is recovered at the tool boundary
and turned into a failure payload for the model; the others end the
invocation in the ``failed`` state.
"""

from __future__ import annotations


class ForexAIError(Exception):
    """Base class for runtime errors surfaced to callers."""


class ToolConnectionError(ForexAIError):
    """An external tool server could not be reached or started."""

    def __init__(self, tool_name: str, reason: str) -> None:
        super().__init__(f"Tool server '{tool_name}' is unavailable: {reason}")
        self.tool_name = tool_name
        self.reason = reason


class ToolExecutionError(ForexAIError):
    """A tool ran but its underlying action failed (e.g. a database insert)."""


class ModelInvocationError(ForexAIError):
    """The upstream model call failed or returned an unusable result.

    The message is the upstream failure text, unchanged, so that it can be
    relayed to the caller and written to the session history as-is.
    """

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage


class UnknownAgentError(LookupError):
    """No agent is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown agent type '{name}'")
        self.name = name
