"""Pipeline runner -- executes an agent (or a sequence of agents) for a session.

Lifecycle of one invocation::

    idle -> session_resolved -> running -> completed | failed

1. **Resolve session**: create the session if absent, render its history,
   append the user message.
2. **Run**: a simple agent is one pydantic-ai run; a sequential agent runs
   its stages in order, feeding each stage's output to the next as its
   prompt and merging it into the RunContext.  Any failure aborts the
   remaining stages.  No retries.
3. **Finish**: the final text (last non-empty output of the last stage) is
   appended to history and emitted as ``result``; on failure the error text
   is appended instead and emitted as ``error``.  ``done`` always follows.

Invocations on the same session id are serialised with a per-session lock;
distinct sessions run concurrently.  ``start`` runs an invocation in a
background task feeding a queue, so a consumer that stops reading does not
cancel it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import anyio
from pydantic_ai import Agent
from pydantic_ai.messages import ModelResponse, TextPart, ToolCallPart

from forexai.agent_runtime.context import Invocation, RunContext
from forexai.agent_runtime.errors import ForexAIError, ModelInvocationError
from forexai.agent_runtime.execution.output import last_non_empty, output_to_context_value, output_to_text
from forexai.agent_runtime.execution.prompt import compose_prompt, render_instructions
from forexai.agent_runtime.models.agent import AgentSpec, SequentialAgentSpec
from forexai.agent_runtime.models.enums import EventType, MessageRole, RunState
from forexai.agent_runtime.models.events import PipelineEvent
from forexai.agent_runtime.registry import ShuttingDownError
from forexai.agent_runtime.tools.external import ExternalServerTool

if TYPE_CHECKING:
    from forexai.agent_runtime.models.agent import AgentNode
    from forexai.agent_runtime.registry import InvocationRegistry
    from forexai.agent_runtime.store.base import SessionStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass
class InvocationResult:
    """Outcome of a drained invocation (unary transports)."""

    session_id: str
    content: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.content is not None


# ---------------------------------------------------------------------------
# Model response helpers
# ---------------------------------------------------------------------------


def _response_text(response: ModelResponse) -> str:
    return "".join(part.content for part in response.parts if isinstance(part, TextPart))


def _has_tool_calls(response: ModelResponse) -> bool:
    return any(isinstance(part, ToolCallPart) for part in response.parts)


def build_agent(spec: AgentSpec, context: Mapping[str, Any]) -> Agent[None, Any]:
    """Map an ``AgentSpec`` to a pydantic-ai ``Agent``.

    External tool servers must already be connected: their toolsets are
    passed through as-is.
    """
    tools = []
    toolsets = []
    for binding in spec.tools:
        if isinstance(binding, ExternalServerTool):
            toolsets.append(binding.toolset)
        else:
            tools.append(binding.as_pydantic_tool())

    return Agent(
        spec.model,
        instructions=render_instructions(spec.instructions, context),
        tools=tools,
        toolsets=toolsets,
        output_type=spec.output_type,
        name=spec.name,
    )


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


class PipelineRunner:
    """Runs agents against sessions and streams ``PipelineEvent``s."""

    def __init__(self, store: SessionStore, registry: InvocationRegistry) -> None:
        self._store = store
        self._registry = registry
        self._session_locks: dict[str, anyio.Lock] = {}
        self._background: set[asyncio.Task[None]] = set()

    @property
    def store(self) -> SessionStore:
        return self._store

    # -- Public API ------------------------------------------------------------

    async def stream(
        self,
        agent: AgentNode,
        message: str,
        *,
        session_id: str,
        context: Mapping[str, Any] | None = None,
    ) -> AsyncIterator[PipelineEvent]:
        """Run *agent* on *message* within *session_id*, yielding events in order."""
        invocation = Invocation(session_id=session_id, agent_name=agent.name, context=RunContext(context))
        yield PipelineEvent.connected(session_id)

        try:
            self._registry.register(invocation)
        except ShuttingDownError as exc:
            yield PipelineEvent.error(session_id, str(exc))
            yield PipelineEvent.done(session_id)
            return

        try:
            async with self._lock_for(session_id):
                async for event in self._execute(agent, message, invocation):
                    yield event
        finally:
            self._registry.unregister(invocation.invocation_id)
            self._release_lock(session_id)

    async def invoke(
        self,
        agent: AgentNode,
        message: str,
        *,
        session_id: str,
        context: Mapping[str, Any] | None = None,
    ) -> InvocationResult:
        """Run to completion and return the final result or error text."""
        result = InvocationResult(session_id=session_id)
        async for event in self.stream(agent, message, session_id=session_id, context=context):
            if event.type is EventType.RESULT:
                result.content = event.content
            elif event.type is EventType.ERROR:
                result.error = event.message
        return result

    def start(
        self,
        agent: AgentNode,
        message: str,
        *,
        session_id: str,
        context: Mapping[str, Any] | None = None,
    ) -> asyncio.Queue[PipelineEvent]:
        """Run ``stream`` in a background task and return the queue it feeds.

        The run continues even if nobody reads the queue, so a disconnected
        SSE client does not cancel an invocation.  ``done`` is always the
        last item put on the queue.
        """
        queue: asyncio.Queue[PipelineEvent] = asyncio.Queue()

        async def _drain() -> None:
            try:
                async for event in self.stream(agent, message, session_id=session_id, context=context):
                    queue.put_nowait(event)
            except Exception as exc:
                logger.exception("Invocation on session %s aborted outside the pipeline", session_id)
                queue.put_nowait(PipelineEvent.error(session_id, str(exc) or type(exc).__name__))
                queue.put_nowait(PipelineEvent.done(session_id))

        task = asyncio.create_task(_drain(), name=f"invocation:{session_id}")
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return queue

    async def run_agent(self, spec: AgentSpec, prompt: str, context: Mapping[str, Any] | None = None) -> str:
        """Run a single agent outside any session and return its output text.

        Used by ``AgentTool`` for agent-as-tool delegation.
        """
        texts: list[str] = []
        async for step in self._run_stage(spec, prompt, RunContext(context), texts):
            logger.debug("Agent %s step: %.200s", spec.name, step)
        return self._stage_output(spec, texts)

    # -- Execution -------------------------------------------------------------

    async def _execute(self, agent: AgentNode, message: str, invocation: Invocation) -> AsyncIterator[PipelineEvent]:
        session_id = invocation.session_id
        stages = agent.sub_agents if isinstance(agent, SequentialAgentSpec) else (agent,)

        final = ""
        try:
            await self._store.create_if_absent(session_id)
            history = await self._store.render_context(session_id)
            invocation.state = RunState.SESSION_RESOLVED
            await self._store.append(session_id, MessageRole.USER, message)

            invocation.state = RunState.RUNNING
            logger.info(
                "Invocation %s started: agent=%s, session=%s, stages=%d",
                invocation.invocation_id,
                agent.name,
                session_id,
                len(stages),
            )

            prompt = message
            for index, stage in enumerate(stages, start=1):
                invocation.current_stage = stage.name
                yield PipelineEvent.processing(
                    session_id,
                    f"Running {stage.name} ({index}/{len(stages)})",
                    stage=stage.name,
                )

                texts: list[str] = []
                stage_history = history if index == 1 else ""
                async for step in self._run_stage(stage, prompt, invocation.context, texts, history=stage_history):
                    yield PipelineEvent.step(session_id, step, stage=stage.name)

                final = self._stage_output(stage, texts)
                if index < len(stages):
                    yield PipelineEvent.step(session_id, final, stage=stage.name)
                prompt = final

            await self._store.append(session_id, MessageRole.ASSISTANT, final)
        except Exception as exc:
            error_text = str(exc) or type(exc).__name__
            invocation.state = RunState.FAILED
            if isinstance(exc, ForexAIError):
                logger.warning(
                    "Invocation %s failed at stage %s: %s", invocation.invocation_id, invocation.current_stage, exc
                )
            else:
                logger.exception("Invocation %s failed at stage %s", invocation.invocation_id, invocation.current_stage)
            await self._record_failure(session_id, error_text)
            yield PipelineEvent.error(session_id, error_text)
            yield PipelineEvent.done(session_id)
            return

        invocation.state = RunState.COMPLETED
        logger.info("Invocation %s completed: %d chars", invocation.invocation_id, len(final))
        yield PipelineEvent.result(session_id, final)
        yield PipelineEvent.done(session_id)

    async def _record_failure(self, session_id: str, error_text: str) -> None:
        """Append the error text as the assistant turn; a store failure here is only logged."""
        try:
            await self._store.append(session_id, MessageRole.ASSISTANT, error_text)
        except Exception:
            logger.exception("Could not record failure in history of session %s", session_id)

    async def _run_stage(
        self,
        spec: AgentSpec,
        prompt: str,
        context: RunContext,
        texts: list[str],
        *,
        history: str = "",
    ) -> AsyncIterator[str]:
        """Run one agent.  Yields text sent alongside tool calls; collects it and the final output into *texts*.

        On success the output is merged into *context* under the stage's key.
        """
        await self._ensure_tools_ready(spec)
        user_prompt = compose_prompt(prompt, history if spec.include_history else "")
        logger.info("Stage %s: running (model=%s, tools=%d)", spec.name, spec.model, len(spec.tools))

        try:
            agent = build_agent(spec, context)
            async with agent.iter(user_prompt) as run:
                async for node in run:
                    if not Agent.is_call_tools_node(node):
                        continue
                    response = node.model_response
                    text = _response_text(response)
                    for part in response.parts:
                        if isinstance(part, ToolCallPart):
                            logger.info("Stage %s: tool call %s", spec.name, part.tool_name)
                    if text and _has_tool_calls(response):
                        texts.append(text)
                        yield text
                result = run.result
        except ForexAIError:
            raise
        except Exception as exc:
            raise ModelInvocationError(str(exc) or type(exc).__name__, stage=spec.name) from exc

        if result is not None and result.output is not None:
            texts.append(output_to_text(result.output))
            context.merge(spec.context_key, output_to_context_value(result.output))

    @staticmethod
    def _stage_output(spec: AgentSpec, texts: list[str]) -> str:
        output = last_non_empty(texts)
        if not output:
            msg = f"Agent '{spec.name}' returned no output"
            raise ModelInvocationError(msg, stage=spec.name)
        return output

    @staticmethod
    async def _ensure_tools_ready(spec: AgentSpec) -> None:
        """Connect every external tool server the agent declares (idempotent)."""
        for binding in spec.tools:
            if isinstance(binding, ExternalServerTool):
                await binding.connect()

    # -- Session locks ---------------------------------------------------------

    def _lock_for(self, session_id: str) -> anyio.Lock:
        lock = self._session_locks.get(session_id)
        if lock is None:
            lock = anyio.Lock()
            self._session_locks[session_id] = lock
        return lock

    def _release_lock(self, session_id: str) -> None:
        """Drop the session's lock once nobody holds or waits for it."""
        lock = self._session_locks.get(session_id)
        if lock is not None and not lock.locked() and lock.statistics().tasks_waiting == 0:
            del self._session_locks[session_id]
