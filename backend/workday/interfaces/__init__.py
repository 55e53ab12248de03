"""Abstract interfaces for infrastructure abstraction."""

from workday.interfaces.auth_provider import IAuthProvider
from workday.interfaces.daily_plan_repository import IDailyPlanRepository
from workday.interfaces.recurring_task_repository import IRecurringTaskRepository
from workday.interfaces.rollover_service import IRolloverService
from workday.interfaces.task_repository import ITaskRepository

__all__ = [
    "IAuthProvider",
    "IDailyPlanRepository",
    "IRecurringTaskRepository",
    "IRolloverService",
    "ITaskRepository",
]
