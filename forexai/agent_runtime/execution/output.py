"""Reducers turning agent outputs into stage results."""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel


def last_non_empty(texts: Iterable[str | None]) -> str:
    """Return the last non-blank text, or ``""``.

    This is lossy on purpose: when a stage produces several text fragments
    (e.g. commentary before a tool call, then a final answer), only the last
    one is kept as the stage's output.
    """
    result = ""
    for text in texts:
        if text and text.strip():
            result = text
    return result


def output_to_text(output: Any) -> str:
    """Render an agent output (text or structured) as text."""
    if isinstance(output, str):
        return output
    if isinstance(output, BaseModel):
        return output.model_dump_json()
    return json.dumps(output, default=str)


def output_to_context_value(output: Any) -> Any:
    """Value stored in the RunContext for a stage output."""
    if isinstance(output, BaseModel):
        return output.model_dump(mode="json")
    return output
