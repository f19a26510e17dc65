"""Unit tests for FunctionTool and AgentTool bindings."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest
from pydantic import BaseModel

from forexai.agent_runtime.errors import ModelInvocationError, ToolExecutionError
from forexai.agent_runtime.models.agent import AgentSpec
from forexai.agent_runtime.tools.base import AgentTool, FunctionTool, failure, success, tool_name_for


class _LookupInput(BaseModel):
    symbol: str
    depth: int = 1


def _tool(execute) -> FunctionTool[_LookupInput]:
    return FunctionTool(name="lookup", description="Look up a symbol.", input_model=_LookupInput, execute=execute)


class _FakeRunner:
    def __init__(self, output: str = "", error: Exception | None = None) -> None:
        self.output = output
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def run_agent(self, spec: AgentSpec, prompt: str, context: Mapping[str, Any] | None = None) -> str:
        self.calls.append((spec.name, prompt))
        if self.error is not None:
            raise self.error
        return self.output


ANALYST = AgentSpec(name="Analyst Agent", model="test", instructions="Analyze.", description="Chart analysis.")

# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------


def test_success_and_failure_payloads() -> None:
    assert success({"id": 3}) == {"status": "success", "id": 3}
    assert success() == {"status": "success"}
    assert failure("boom") == {"status": "error", "error_message": "boom"}


@pytest.mark.parametrize(
    ("name", "expected"),
    [("Analyst Agent", "analyst_agent"), ("  ForexAI Orchestrator ", "forexai_orchestrator"), ("!!!", "tool")],
)
def test_tool_name_for(name: str, expected: str) -> None:
    assert tool_name_for(name) == expected


# ---------------------------------------------------------------------------
# FunctionTool
# ---------------------------------------------------------------------------


async def test_function_tool_success() -> None:
    async def _execute(args: _LookupInput) -> dict[str, Any]:
        return {"symbol": args.symbol, "depth": args.depth}

    payload = await _tool(_execute).invoke({"symbol": "EURUSD", "depth": 3})

    assert payload == {"status": "success", "symbol": "EURUSD", "depth": 3}


async def test_function_tool_rejects_invalid_input() -> None:
    called = False

    async def _execute(args: _LookupInput) -> dict[str, Any]:
        nonlocal called
        called = True
        return {}

    payload = await _tool(_execute).invoke({"depth": "deep"})

    assert payload["status"] == "error"
    assert "symbol" in payload["error_message"]
    assert "depth" in payload["error_message"]
    assert not called


async def test_function_tool_reports_execution_error() -> None:
    async def _execute(args: _LookupInput) -> dict[str, Any]:
        msg = "insert failed"
        raise ToolExecutionError(msg)

    payload = await _tool(_execute).invoke({"symbol": "EURUSD"})

    assert payload == {"status": "error", "error_message": "insert failed"}


async def test_function_tool_never_raises_unexpected_errors() -> None:
    async def _execute(args: _LookupInput) -> dict[str, Any]:
        raise KeyError

    payload = await _tool(_execute).invoke({"symbol": "EURUSD"})

    assert payload["status"] == "error"
    assert payload["error_message"]


def test_function_tool_as_pydantic_tool() -> None:
    async def _execute(args: _LookupInput) -> dict[str, Any]:
        return {}

    tool = _tool(_execute).as_pydantic_tool()

    assert tool.name == "lookup"
    assert tool.description == "Look up a symbol."


# ---------------------------------------------------------------------------
# AgentTool
# ---------------------------------------------------------------------------


async def test_agent_tool_delegates_to_runner() -> None:
    runner = _FakeRunner(output="BULLISH")
    tool = AgentTool(ANALYST, runner, name="analyst")

    payload = await tool.invoke({"input": "Analyze EURUSD"})

    assert payload == {"status": "success", "output": "BULLISH"}
    assert runner.calls == [("Analyst Agent", "Analyze EURUSD")]


async def test_agent_tool_requires_input() -> None:
    runner = _FakeRunner(output="unused")

    payload = await AgentTool(ANALYST, runner).invoke({})

    assert payload["status"] == "error"
    assert runner.calls == []


async def test_agent_tool_propagates_model_failures() -> None:
    runner = _FakeRunner(error=ModelInvocationError("quota exceeded", stage="Analyst Agent"))

    with pytest.raises(ModelInvocationError, match="quota exceeded"):
        await AgentTool(ANALYST, runner).invoke({"input": "go"})


def test_agent_tool_naming_defaults() -> None:
    tool = AgentTool(ANALYST, _FakeRunner())

    assert tool.tool_name == "analyst_agent"
    assert tool.tool_description == "Chart analysis."
    assert tool.as_pydantic_tool().name == "analyst_agent"
