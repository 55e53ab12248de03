"""
Recurring task materialization service.

Expands recurring task templates into concrete tasks on daily plans for a
requested date or date window. Every write is an insert-if-absent, so
repeated or overlapping calls converge on the same state.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from workday.core.exceptions import InfrastructureError, InvalidDateRangeError
from workday.core.logger import setup_logger
from workday.interfaces.daily_plan_repository import IDailyPlanRepository
from workday.interfaces.recurring_task_repository import IRecurringTaskRepository
from workday.interfaces.rollover_service import IRolloverService
from workday.interfaces.task_repository import ITaskRepository
from workday.models.daily_plan import (
    DailyPlan,
    DailyPlanWithTasks,
    MaterializationResult,
)
from workday.models.enums import PlanVisibility
from workday.models.recurring_task import RecurringTask
from workday.services import recurrence_rules

logger = setup_logger(__name__)


class MaterializationService:
    """Service for materializing recurring task templates into daily plans."""

    def __init__(
        self,
        recurring_repo: IRecurringTaskRepository,
        plan_repo: IDailyPlanRepository,
        task_repo: ITaskRepository,
        rollover: Optional[IRolloverService] = None,
        max_range_days: Optional[int] = None,
    ):
        self.recurring_repo = recurring_repo
        self.plan_repo = plan_repo
        self.task_repo = task_repo
        self.rollover = rollover
        self.max_range_days = max_range_days

    def validate_range(self, start: date, end: date) -> None:
        """Reject reversed or oversized windows before any work is done."""
        if end < start:
            raise InvalidDateRangeError(
                "Invalid date range.", details={"start": str(start), "end": str(end)}
            )
        span = (end - start).days + 1
        if self.max_range_days is not None and span > self.max_range_days:
            raise InvalidDateRangeError(
                f"Date range spans {span} days; at most {self.max_range_days} allowed.",
                details={"start": str(start), "end": str(end)},
            )

    @staticmethod
    def applies_on(template: RecurringTask, day: date) -> bool:
        """Whether template should have an instance on day."""
        if template.repeat_until is not None and day > template.repeat_until:
            return False
        if template.start_date is None:
            return False
        return recurrence_rules.matches(template.rule, template.start_date, day)

    async def materialize(
        self,
        user_id: str,
        workspace_id: str,
        start: date,
        end: date,
        default_visibility: PlanVisibility = PlanVisibility.TEAM,
    ) -> MaterializationResult:
        """
        Ensure every occurrence in [start, end] has a plan and a task.

        Templates are read once and used as a snapshot for the whole pass.
        A storage failure aborts only its (date, template) unit; the date is
        reported in failed_dates and the pass continues.

        Args:
            user_id: Owner user ID
            workspace_id: Workspace ID
            start: First date (inclusive)
            end: Last date (inclusive)
            default_visibility: Visibility for plans created by this pass

        Returns:
            MaterializationResult with every stored plan in the window
            (chronological), each with its tasks in position order
        """
        self.validate_range(start, end)

        templates = await self.recurring_repo.list_active(user_id, workspace_id)
        plans_by_date: dict[date, DailyPlan] = {
            plan.date: plan
            for plan in await self.plan_repo.list_range(user_id, workspace_id, start, end)
        }
        result = MaterializationResult()

        for day in recurrence_rules.iter_dates(start, end):
            day_failed = False
            for template in templates:
                if not self.applies_on(template, day):
                    continue
                try:
                    plan = plans_by_date.get(day)
                    if plan is None:
                        plan, plan_created = await self.plan_repo.get_or_create(
                            user_id, workspace_id, day, default_visibility
                        )
                        plans_by_date[day] = plan
                        if plan_created:
                            result.created_plan_count += 1
                            logger.info(
                                f"plans.created: plan {plan.id} for {user_id}/{workspace_id} on {day}"
                            )

                    task, task_created = await self.task_repo.get_or_create_from_template(
                        plan, template
                    )
                    if task_created:
                        result.created_task_count += 1
                        logger.info(
                            f"tasks.recurrence.created: task {task.id} in plan {plan.id} "
                            f"from template {template.id}"
                        )
                except InfrastructureError:
                    logger.exception(
                        f"Materializing template {template.id} on {day} failed"
                    )
                    day_failed = True

            if day_failed:
                result.failed_dates.append(day)
            else:
                result.succeeded_dates.append(day)

        plans = sorted(plans_by_date.values(), key=lambda plan: plan.date)
        tasks_by_plan = await self.task_repo.list_for_plans([plan.id for plan in plans])
        result.plans = [
            DailyPlanWithTasks.from_plan(plan, tasks_by_plan.get(plan.id, []))
            for plan in plans
        ]

        if result.created_task_count or result.failed_dates:
            logger.info(
                f"Materialized {start}..{end} for {user_id}/{workspace_id}: "
                f"{result.created_plan_count} plan(s), {result.created_task_count} task(s) created, "
                f"{len(result.failed_dates)} failed date(s)"
            )
        return result

    async def materialize_day(
        self,
        user_id: str,
        workspace_id: str,
        day: date,
        default_visibility: PlanVisibility = PlanVisibility.TEAM,
        today: Optional[date] = None,
    ) -> Optional[DailyPlanWithTasks]:
        """
        Materialize a single date.

        When day is today, incomplete tasks are first rolled over from
        yesterday through the rollover collaborator.

        Returns:
            The plan for day with its tasks, or None when no plan exists
        """
        if self.rollover is not None and today is not None and day == today:
            try:
                await self.rollover.rollover(
                    user_id, workspace_id, today - timedelta(days=1), today
                )
            except InfrastructureError:
                logger.exception(f"Rollover into {today} failed for {user_id}/{workspace_id}")

        result = await self.materialize(user_id, workspace_id, day, day, default_visibility)
        return result.plans[0] if result.plans else None

    async def materialize_range(
        self,
        user_id: str,
        workspace_id: str,
        start: date,
        end: date,
        default_visibility: PlanVisibility = PlanVisibility.TEAM,
    ) -> MaterializationResult:
        """
        Materialize a window and return one entry per calendar day.

        Days without a stored plan are filled with empty placeholders so the
        caller can render a contiguous calendar.
        """
        result = await self.materialize(user_id, workspace_id, start, end, default_visibility)
        stored = {plan.date: plan for plan in result.plans}
        result.plans = [
            stored.get(day)
            or DailyPlanWithTasks.placeholder(user_id, workspace_id, day, default_visibility)
            for day in recurrence_rules.iter_dates(start, end)
        ]
        return result
