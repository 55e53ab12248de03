"""
Daily plan repository interface.

Defines the contract for daily plan persistence. Exactly one plan may exist
per (user, workspace, date).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional
from uuid import UUID

from workday.models.daily_plan import DailyPlan
from workday.models.enums import PlanVisibility


class IDailyPlanRepository(ABC):
    """Abstract interface for daily plan persistence."""

    @abstractmethod
    async def get_or_create(
        self,
        user_id: str,
        workspace_id: str,
        plan_date: date,
        default_visibility: PlanVisibility,
    ) -> tuple[DailyPlan, bool]:
        """
        Ensure the plan for (user, workspace, date) exists.

        Atomic with respect to the uniqueness of the key: under concurrent
        calls exactly one plan is created and every caller gets it back.
        An existing plan is returned untouched.

        Args:
            user_id: Owner user ID
            workspace_id: Workspace ID
            plan_date: Calendar date of the plan
            default_visibility: Visibility used only when creating

        Returns:
            (plan, created)
        """
        pass

    @abstractmethod
    async def get(
        self, user_id: str, workspace_id: str, plan_date: date
    ) -> Optional[DailyPlan]:
        """Get the plan for a date, or None."""
        pass

    @abstractmethod
    async def list_range(
        self, user_id: str, workspace_id: str, start: date, end: date
    ) -> list[DailyPlan]:
        """List plans with start <= date <= end, ordered by date."""
        pass

    @abstractmethod
    async def set_visibility(
        self,
        user_id: str,
        workspace_id: str,
        plan_id: UUID,
        visibility: PlanVisibility,
    ) -> DailyPlan:
        """
        Change the visibility of an existing plan.

        Raises:
            NotFoundError: If the plan does not exist in the workspace
        """
        pass
