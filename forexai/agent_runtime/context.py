"""Per-invocation runtime state.

``RunContext`` is the key/value map threaded between the stages of a
sequential pipeline; ``Invocation`` is the bookkeeping record the runner
registers in the ``InvocationRegistry`` while a pipeline is in flight.
Neither is persisted.

Not to be confused with pydantic-ai's ``RunContext`` (tool dependency
context): this one only carries values between our own stages.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from forexai.agent_runtime.models.enums import RunState


class RunContext(Mapping[str, Any]):
    """Append-only view of values produced so far in one invocation.

    Stage *k* sees the caller's seed values and everything written by stages
    ``1..k-1``.  Values are read-only through the Mapping interface; only the
    runner writes, via ``merge``.
    """

    def __init__(self, seed: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(seed or {})

    def merge(self, key: str, value: Any) -> None:
        self._values[key] = value

    def snapshot(self) -> dict[str, Any]:
        return dict(self._values)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"RunContext(keys={sorted(self._values)})"


@dataclass
class Invocation:
    """In-flight state for one pipeline run against one session."""

    session_id: str
    agent_name: str
    invocation_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: RunState = RunState.IDLE
    context: RunContext = field(default_factory=RunContext)
    started_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    current_stage: str | None = None
    """Name of the stage currently running (composite agents)."""
