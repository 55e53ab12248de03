"""
Daily plan API endpoints.

Reading a plan materializes recurring tasks for the requested dates first,
so callers always see every occurrence that is due.
"""

from datetime import date

from fastapi import APIRouter, HTTPException, Query, status

from workday.api.deps import (
    AppSettings,
    CurrentUser,
    CurrentWorkspace,
    DailyPlanRepo,
    MaterializationSvc,
)
from workday.core.exceptions import InvalidDateRangeError, NotFoundError
from workday.models.daily_plan import (
    DailyPlanCreate,
    EnsurePlanResponse,
    PlanRangeResponse,
    PlanResponse,
)
from workday.models.enums import PlanVisibility
from workday.utils.datetime_utils import get_user_today

router = APIRouter()


@router.get("", response_model=PlanResponse)
async def get_plan(
    user: CurrentUser,
    workspace: CurrentWorkspace,
    service: MaterializationSvc,
    settings: AppSettings,
    plan_date: date = Query(..., alias="date", description="Plan date (YYYY-MM-DD)"),
) -> PlanResponse:
    """Get the plan for a date, materializing recurring tasks first."""
    visibility = workspace.default_visibility(
        PlanVisibility(settings.DEFAULT_PLAN_VISIBILITY)
    )
    plan = await service.materialize_day(
        user.id,
        workspace.id,
        plan_date,
        default_visibility=visibility,
        today=get_user_today(settings.TIMEZONE),
    )
    return PlanResponse(plan=plan)


@router.get("/range", response_model=PlanRangeResponse)
async def get_plan_range(
    user: CurrentUser,
    workspace: CurrentWorkspace,
    service: MaterializationSvc,
    settings: AppSettings,
    start: date = Query(..., description="First date (inclusive)"),
    end: date = Query(..., description="Last date (inclusive)"),
) -> PlanRangeResponse:
    """Get one plan per day in [start, end], materializing recurring tasks first."""
    visibility = workspace.default_visibility(
        PlanVisibility(settings.DEFAULT_PLAN_VISIBILITY)
    )
    try:
        result = await service.materialize_range(
            user.id, workspace.id, start, end, default_visibility=visibility
        )
    except InvalidDateRangeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return PlanRangeResponse(plans=result.plans, failed_dates=result.failed_dates)


@router.post("", response_model=EnsurePlanResponse)
async def ensure_plan(
    payload: DailyPlanCreate,
    user: CurrentUser,
    workspace: CurrentWorkspace,
    repo: DailyPlanRepo,
    settings: AppSettings,
) -> EnsurePlanResponse:
    """
    Create the plan for a date unless it already exists.

    An explicit visibility is applied to an existing plan as well.
    """
    visibility = payload.visibility or workspace.default_visibility(
        PlanVisibility(settings.DEFAULT_PLAN_VISIBILITY)
    )
    plan, created = await repo.get_or_create(
        user.id, workspace.id, payload.date, visibility
    )
    if not created and payload.visibility and plan.visibility != payload.visibility:
        try:
            plan = await repo.set_visibility(
                user.id, workspace.id, plan.id, payload.visibility
            )
        except NotFoundError as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=str(exc),
            ) from exc
    return EnsurePlanResponse(id=plan.id, created=created)
