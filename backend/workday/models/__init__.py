"""Pydantic models (schemas) for the application."""

from workday.models.enums import (
    PlanVisibility,
    Priority,
    RecurrenceRule,
    TaskStatus,
    WorkspaceType,
)
from workday.models.task import Attachment, Subtask, Task
from workday.models.daily_plan import (
    DailyPlan,
    DailyPlanCreate,
    DailyPlanWithTasks,
    MaterializationResult,
)
from workday.models.recurring_task import (
    RecurringTask,
    RecurringTaskCreate,
    RecurringTaskUpdate,
)

__all__ = [
    # Enums
    "PlanVisibility",
    "Priority",
    "RecurrenceRule",
    "TaskStatus",
    "WorkspaceType",
    # Task
    "Task",
    "Subtask",
    "Attachment",
    # Daily plan
    "DailyPlan",
    "DailyPlanCreate",
    "DailyPlanWithTasks",
    "MaterializationResult",
    # Recurring task
    "RecurringTask",
    "RecurringTaskCreate",
    "RecurringTaskUpdate",
]
