"""``save_daily_plan`` -- persists the daily planner's output.

The tool is a thin FunctionTool over a ``DailyPlanWriter``.  Writer failures
become ``ToolExecutionError`` and are reported back to the model as a
failure payload; they never abort the pipeline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from loguru import logger
from pydantic import BaseModel, Field
from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError

from forexai.agent_runtime.db.tables import DailyAnalysis
from forexai.agent_runtime.errors import ToolExecutionError
from forexai.agent_runtime.models.enums import MarketBias
from forexai.agent_runtime.tools.base import FunctionTool

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

SAVE_DAILY_PLAN = "save_daily_plan"


class SaveDailyPlanInput(BaseModel):
    bias: MarketBias
    levels: list[float] = Field(description="Key support/resistance price levels")
    reasoning: str


class DailyPlanWriter(Protocol):
    async def save(self, bias: MarketBias, levels: list[float], reasoning: str) -> int:
        """Persist a plan and return its generated id.  Raises ``ToolExecutionError``."""
        ...


class SqlDailyPlanWriter:
    """Writes plans to the ``daily_analysis`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(self, bias: MarketBias, levels: list[float], reasoning: str) -> int:
        stmt = (
            insert(DailyAnalysis)
            .values(bias=bias.value, support_resistance_levels=levels, reasoning=reasoning)
            .returning(DailyAnalysis.id)
        )
        async with self._session_factory() as db:
            try:
                result = await db.execute(stmt)
                plan_id = result.scalar_one()
                await db.commit()
            except SQLAlchemyError as exc:
                await db.rollback()
                msg = f"Failed to save daily plan: {exc}"
                raise ToolExecutionError(msg) from exc
        return plan_id


class UnconfiguredPlanWriter:
    """Stand-in used when no database is configured; every save fails."""

    async def save(self, bias: MarketBias, levels: list[float], reasoning: str) -> int:
        msg = "Database not configured (FOREX_DATABASE_URL is unset)."
        raise ToolExecutionError(msg)


def build_save_daily_plan_tool(writer: DailyPlanWriter) -> FunctionTool[SaveDailyPlanInput]:
    async def _execute(args: SaveDailyPlanInput) -> dict[str, Any]:
        plan_id = await writer.save(args.bias, args.levels, args.reasoning)
        logger.info("Daily plan saved: id={} bias={} levels={}", plan_id, args.bias, args.levels)
        return {"message": f"Plan saved with ID: {plan_id}", "id": plan_id}

    return FunctionTool(
        name=SAVE_DAILY_PLAN,
        description="Saves the generated trading plan (bias, levels, reasoning) to the PostgreSQL database.",
        input_model=SaveDailyPlanInput,
        execute=_execute,
    )
