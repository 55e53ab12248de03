"""
Daily plan models.

A daily plan holds one user's tasks for one date inside one workspace.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from workday.models.enums import PlanVisibility
from workday.models.task import Task


class DailyPlan(BaseModel):
    """Daily plan row."""

    id: UUID
    user_id: str
    workspace_id: str
    date: date
    visibility: PlanVisibility = PlanVisibility.TEAM
    submitted: bool = False
    reviewed: bool = False
    created_at: datetime
    updated_at: datetime


class DailyPlanCreate(BaseModel):
    """Request body for ensuring a plan exists."""

    date: date
    visibility: Optional[PlanVisibility] = None


class DailyPlanWithTasks(BaseModel):
    """
    Daily plan with its tasks attached.

    Placeholders stand in for calendar days that have no stored plan, so a
    range response covers every day of the window.
    """

    id: Optional[UUID] = None
    user_id: str
    workspace_id: str
    date: date
    visibility: PlanVisibility = PlanVisibility.TEAM
    submitted: bool = False
    reviewed: bool = False
    is_placeholder: bool = False
    tasks: list[Task] = Field(default_factory=list)

    @classmethod
    def from_plan(cls, plan: DailyPlan, tasks: list[Task]) -> "DailyPlanWithTasks":
        return cls(
            id=plan.id,
            user_id=plan.user_id,
            workspace_id=plan.workspace_id,
            date=plan.date,
            visibility=plan.visibility,
            submitted=plan.submitted,
            reviewed=plan.reviewed,
            tasks=tasks,
        )

    @classmethod
    def placeholder(
        cls,
        user_id: str,
        workspace_id: str,
        day: date,
        visibility: PlanVisibility,
    ) -> "DailyPlanWithTasks":
        return cls(
            user_id=user_id,
            workspace_id=workspace_id,
            date=day,
            visibility=visibility,
            is_placeholder=True,
        )


class MaterializationResult(BaseModel):
    """Outcome of one materialization pass over a date window."""

    plans: list[DailyPlanWithTasks] = Field(default_factory=list)
    created_plan_count: int = 0
    created_task_count: int = 0
    succeeded_dates: list[date] = Field(default_factory=list)
    failed_dates: list[date] = Field(default_factory=list)


class PlanResponse(BaseModel):
    """Single-day response."""

    plan: Optional[DailyPlanWithTasks] = None


class PlanRangeResponse(BaseModel):
    """Range response: one entry per calendar day in the window."""

    plans: list[DailyPlanWithTasks]
    failed_dates: list[date] = Field(default_factory=list)


class EnsurePlanResponse(BaseModel):
    """Response for POST /plans."""

    id: UUID
    created: bool
