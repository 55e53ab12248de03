"""
Enum definitions for the application.

These enums are used across models and provide type-safe status/priority values.
"""

from enum import Enum


class RecurrenceRule(str, Enum):
    """
    Day pattern a recurring task template follows.

    NONE and CUSTOM are accepted on input but never auto-materialize.
    """

    NONE = "none"
    DAILY_WEEKDAYS = "daily_weekdays"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    MONTHLY_NTH_WEEKDAY = "monthly_nth_weekday"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    CUSTOM = "custom"
    SPECIFIC_TIME = "specific_time"

    @classmethod
    def parse(cls, value: "str | RecurrenceRule | None") -> "RecurrenceRule | None":
        """Map a stored rule string to a member, or None when unrecognized."""
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class TaskStatus(str, Enum):
    """Task status."""

    PLANNED = "planned"
    DONE = "done"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"
    UNPLANNED = "unplanned"


class Priority(str, Enum):
    """Task priority."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


class PlanVisibility(str, Enum):
    """Who can see a daily plan."""

    TEAM = "team"
    PRIVATE = "private"


class WorkspaceType(str, Enum):
    """Workspace kind. Personal workspaces default plans to private."""

    PERSONAL = "personal"
    TEAM = "team"
