"""Daily planner endpoint.

Runs the three-stage planner (chart capture, strategy analysis, plan
persistence) once, seeding the RunContext from the request body.
"""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from forexai.agent_runtime.agents.catalog import PLANNER
from forexai.agent_runtime.deps import Catalog, Registry, Runner, refuse_if_shutting_down
from forexai.agent_runtime.models.api import PlanRequest, PlanResponse

router = APIRouter(tags=["planner"])

MORNING_CHART_IMAGE = "morning_chart.png"
PLAN_TRIGGER = "Start the daily analysis."


@router.post("/plan", response_model=PlanResponse)
async def handle_plan(
    body: PlanRequest,
    runner: Runner,
    catalog: Catalog,
    registry: Registry,
) -> PlanResponse | JSONResponse:
    refuse_if_shutting_down(registry)
    planner = catalog.resolve(PLANNER)
    context = {
        "strategy_pdf_text": body.strategy_pdf_text,
        "broker_url": body.broker_url,
        "morning_chart_image": MORNING_CHART_IMAGE,
    }

    result = await runner.invoke(planner, PLAN_TRIGGER, session_id=body.session_id, context=context)
    if not result.ok:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"status": "error", "message": result.error or "Planner returned no output"},
        )
    return PlanResponse(result=result.content)
