"""Instruction rendering and prompt composition.

Agent instructions may contain Jinja2 placeholders that are filled from the
RunContext at invocation time, e.g. the chart-capture stage of the daily
planner::

    1. Navigate to the broker URL provided: {{ broker_url }}

Template variables available:

- every key currently in the RunContext (caller seed + earlier stage outputs)
- ``date``: current date (YYYY-MM-DD)

Undefined variables render as empty strings.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import jinja2

_ENV = jinja2.Environment(autoescape=False)  # noqa: S701


def render_instructions(
    template: str,
    context: Mapping[str, Any],
    *,
    extra_vars: Mapping[str, object] | None = None,
) -> str:
    """Render an instruction template against the RunContext.

    If the template contains no Jinja2 syntax, it is returned unchanged.
    """
    if "{{" not in template and "{%" not in template:
        return template

    template_vars: dict[str, object] = {"date": datetime.now(tz=UTC).strftime("%Y-%m-%d")}
    template_vars.update(context)
    if extra_vars:
        template_vars.update(extra_vars)

    return _ENV.from_string(template).render(**template_vars)


def compose_prompt(message: str, history: str = "") -> str:
    """Build the user prompt: rendered session history followed by the new input."""
    if not history:
        return message
    return f"Conversation so far:\n{history}\n\nCurrent request:\n{message}"
