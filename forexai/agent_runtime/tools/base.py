"""Function and agent tool bindings.

Both variants share one capability, ``invoke(raw_input) -> payload``, and
are exposed to pydantic-ai through ``Tool.from_schema`` so that argument
validation happens here rather than inside the SDK.  Payloads always carry a
``status`` of ``success`` or ``error``; a ``FunctionTool`` never raises past
``invoke``.
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar

from loguru import logger
from pydantic import BaseModel, Field, ValidationError
from pydantic_ai import Tool

from forexai.agent_runtime.errors import ToolExecutionError
from forexai.agent_runtime.models.enums import ToolStatus

if TYPE_CHECKING:
    from forexai.agent_runtime.models.agent import AgentSpec

InputT = TypeVar("InputT", bound=BaseModel)

# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------


def success(payload: Mapping[str, Any] | None = None) -> dict[str, Any]:
    return {"status": ToolStatus.SUCCESS.value, **(payload or {})}


def failure(reason: str) -> dict[str, Any]:
    return {"status": ToolStatus.ERROR.value, "error_message": reason}


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic ValidationError into one readable line."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "input"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def tool_name_for(name: str) -> str:
    """Turn a display name (``Analyst Agent``) into a model-safe tool name."""
    slug = re.sub(r"[^a-zA-Z0-9_-]+", "_", name.strip()).strip("_").lower()
    return slug or "tool"


# ---------------------------------------------------------------------------
# FunctionTool
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FunctionTool(Generic[InputT]):
    """A typed function the model may call.

    ``execute`` receives the validated input model.  It reports an expected
    failure by raising ``ToolExecutionError``; any other exception is also
    converted into a failure payload (and logged with its traceback).
    """

    name: str
    description: str
    input_model: type[InputT]
    execute: Callable[[InputT], Awaitable[Mapping[str, Any]]] = field(compare=False)

    async def invoke(self, raw: Mapping[str, Any]) -> dict[str, Any]:
        try:
            args = self.input_model.model_validate(raw)
        except ValidationError as exc:
            reason = f"Invalid input for '{self.name}': {describe_validation_error(exc)}"
            logger.warning("Tool {} rejected input: {}", self.name, reason)
            return failure(reason)

        try:
            payload = await self.execute(args)
        except ToolExecutionError as exc:
            logger.warning("Tool {} failed: {}", self.name, exc)
            return failure(str(exc) or f"Tool '{self.name}' failed")
        except Exception as exc:
            logger.exception("Tool {} raised", self.name)
            return failure(str(exc) or type(exc).__name__)

        logger.debug("Tool {} succeeded", self.name)
        return success(payload)

    def as_pydantic_tool(self) -> Tool[Any]:
        async def _call(**kwargs: Any) -> dict[str, Any]:
            return await self.invoke(kwargs)

        return Tool.from_schema(
            _call,
            name=self.name,
            description=self.description,
            json_schema=self.input_model.model_json_schema(),
        )


# ---------------------------------------------------------------------------
# AgentTool
# ---------------------------------------------------------------------------


class AgentRunner(Protocol):
    """The slice of the pipeline runner an AgentTool needs."""

    async def run_agent(self, spec: AgentSpec, prompt: str, context: Mapping[str, Any] | None = None) -> str: ...


class AgentToolInput(BaseModel):
    input: str = Field(description="The task or question to hand to the agent.")


@dataclass(frozen=True)
class AgentTool:
    """Exposes another agent as a callable tool.

    The wrapped agent runs without session history.  Model failures are not
    caught here: they abort the calling agent's stage.
    """

    agent: AgentSpec
    runner: AgentRunner = field(compare=False, repr=False)
    name: str | None = None
    description: str | None = None

    @property
    def tool_name(self) -> str:
        return self.name or tool_name_for(self.agent.name)

    @property
    def tool_description(self) -> str:
        return self.description or self.agent.description or f"Delegate a task to {self.agent.name}."

    async def invoke(self, raw: Mapping[str, Any]) -> dict[str, Any]:
        try:
            args = AgentToolInput.model_validate(raw)
        except ValidationError as exc:
            return failure(f"Invalid input for '{self.tool_name}': {describe_validation_error(exc)}")

        logger.info("Delegating to agent {} via tool {}", self.agent.name, self.tool_name)
        output = await self.runner.run_agent(self.agent, args.input)
        return success({"output": output})

    def as_pydantic_tool(self) -> Tool[Any]:
        async def _call(**kwargs: Any) -> dict[str, Any]:
            return await self.invoke(kwargs)

        return Tool.from_schema(
            _call,
            name=self.tool_name,
            description=self.tool_description,
            json_schema=AgentToolInput.model_json_schema(),
        )
