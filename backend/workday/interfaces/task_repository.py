"""
Task repository interface.

Defines the contract for the task instances stored in daily plans.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from uuid import UUID

from workday.models.daily_plan import DailyPlan
from workday.models.recurring_task import RecurringTask
from workday.models.task import Task


class ITaskRepository(ABC):
    """Abstract interface for task persistence."""

    @abstractmethod
    async def get_or_create_from_template(
        self, plan: DailyPlan, template: RecurringTask
    ) -> tuple[Task, bool]:
        """
        Ensure the instance of a template exists in a plan.

        The existence check (keyed on plan.id and template.id), the
        max-position read and the insert run as one atomic unit, so
        concurrent callers neither duplicate the instance nor share a
        position.

        Args:
            plan: Target daily plan
            template: Recurring task template being materialized

        Returns:
            (task, created)
        """
        pass

    @abstractmethod
    async def list_for_plans(self, plan_ids: list[UUID]) -> dict[UUID, list[Task]]:
        """
        Get tasks of several plans.

        Returns a mapping plan_id -> tasks ordered by position, then creation
        time, with subtasks and attachments attached. Plans without tasks map
        to an empty list.
        """
        pass

    @abstractmethod
    async def count_by_template(self, recurring_task_id: UUID) -> int:
        """Count instances materialized from a template."""
        pass
