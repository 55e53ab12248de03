"""API routers."""

from workday.api import plans, recurring_tasks

__all__ = [
    "plans",
    "recurring_tasks",
]
