"""
Recurring task service.

Applies template edits while keeping already materialized tasks consistent.
"""

from __future__ import annotations

from uuid import UUID

from workday.core.exceptions import BusinessLogicError, NotFoundError, ValidationError
from workday.core.logger import setup_logger
from workday.interfaces.recurring_task_repository import IRecurringTaskRepository
from workday.interfaces.task_repository import ITaskRepository
from workday.models.recurring_task import RecurringTask, RecurringTaskUpdate

logger = setup_logger(__name__)

# Changing these would rewrite history for instances that already exist
SCHEDULE_FIELDS = ("rule", "start_date")


class RecurringTaskService:
    """Service for editing recurring task templates."""

    def __init__(
        self,
        recurring_repo: IRecurringTaskRepository,
        task_repo: ITaskRepository,
    ):
        self.recurring_repo = recurring_repo
        self.task_repo = task_repo

    async def update(
        self,
        user_id: str,
        workspace_id: str,
        recurring_task_id: UUID,
        update: RecurringTaskUpdate,
    ) -> RecurringTask:
        """
        Update a template.

        Raises:
            NotFoundError: If the template does not exist in the workspace
            BusinessLogicError: If the rule or anchor date changes after
                tasks were materialized from the template
            ValidationError: If repeat_until would fall before start_date
        """
        current = await self.recurring_repo.get(user_id, workspace_id, recurring_task_id)
        if not current:
            raise NotFoundError(f"RecurringTask {recurring_task_id} not found")

        changes = update.model_dump(exclude_unset=True)
        schedule_changed = [
            field
            for field in SCHEDULE_FIELDS
            if field in changes and changes[field] != getattr(current, field)
        ]
        if schedule_changed:
            instance_count = await self.task_repo.count_by_template(recurring_task_id)
            if instance_count > 0:
                logger.info(
                    f"Rejected change of {', '.join(schedule_changed)} for recurring task "
                    f"{recurring_task_id} with {instance_count} materialized task(s)"
                )
                raise BusinessLogicError(
                    f"Cannot change {', '.join(schedule_changed)} of a recurring task "
                    "that already has materialized tasks",
                    details={"fields": schedule_changed, "instances": instance_count},
                )

        start_date = changes.get("start_date") or current.start_date
        repeat_until = changes["repeat_until"] if "repeat_until" in changes else current.repeat_until
        if start_date and repeat_until and repeat_until < start_date:
            raise ValidationError("repeat_until must not be before start_date")

        return await self.recurring_repo.update(
            user_id, workspace_id, recurring_task_id, update
        )
