"""
Rollover collaborator interface.

Carries incomplete tasks from one day's plan into another. Invoked before
materialization when today's plan is requested.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date


class IRolloverService(ABC):
    """Abstract interface for rolling incomplete tasks forward."""

    @abstractmethod
    async def rollover(
        self, user_id: str, workspace_id: str, from_date: date, to_date: date
    ) -> int:
        """
        Move incomplete tasks from from_date's plan to to_date's plan.

        Returns:
            Number of tasks moved
        """
        pass
