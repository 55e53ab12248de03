"""
Recurring task repository interface.

Defines contract for recurring task template persistence and the
read-only registry view the materializer consumes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from workday.models.recurring_task import (
    RecurringTask,
    RecurringTaskCreate,
    RecurringTaskUpdate,
)


class IRecurringTaskRepository(ABC):
    """Abstract interface for recurring task template persistence."""

    @abstractmethod
    async def create(
        self, user_id: str, workspace_id: str, data: RecurringTaskCreate
    ) -> RecurringTask:
        """Create a new recurring task template."""
        pass

    @abstractmethod
    async def get(
        self, user_id: str, workspace_id: str, recurring_task_id: UUID
    ) -> Optional[RecurringTask]:
        """Get a template by ID within the user's workspace."""
        pass

    @abstractmethod
    async def list(
        self,
        user_id: str,
        workspace_id: str,
        include_inactive: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> list[RecurringTask]:
        """List templates."""
        pass

    @abstractmethod
    async def list_active(self, user_id: str, workspace_id: str) -> list[RecurringTask]:
        """
        Get every template that may produce occurrences.

        Returns templates that are active and have no parent template,
        scoped to (user, workspace).
        """
        pass

    @abstractmethod
    async def update(
        self,
        user_id: str,
        workspace_id: str,
        recurring_task_id: UUID,
        update: RecurringTaskUpdate,
    ) -> RecurringTask:
        """Update a template. Raises NotFoundError if missing."""
        pass

    @abstractmethod
    async def deactivate(
        self, user_id: str, workspace_id: str, recurring_task_id: UUID
    ) -> bool:
        """
        Deactivate a template.

        Templates are never hard-deleted so that materialized instances keep
        a valid back-reference. Returns False when the template does not exist.
        """
        pass
