"""
Task instance model definitions.

Task instances are the concrete, dated items listed in a daily plan.
"""

from datetime import date, datetime, time
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from workday.models.enums import Priority, RecurrenceRule, TaskStatus


class Subtask(BaseModel):
    """Checklist item under a task (passed through unchanged)."""

    id: UUID
    title: str
    completed: bool = False
    estimated_minutes: Optional[int] = None
    actual_minutes: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


class Attachment(BaseModel):
    """Link attached to a task (passed through unchanged)."""

    id: UUID
    url: str


class Task(BaseModel):
    """A task as stored in a daily plan."""

    id: UUID
    daily_plan_id: UUID
    user_id: str
    workspace_id: str
    title: str
    category: str
    status: TaskStatus = TaskStatus.PLANNED
    estimated_minutes: Optional[int] = None
    actual_minutes: Optional[int] = None
    notes: Optional[str] = None
    priority: Priority = Priority.NONE
    due_date: Optional[date] = None
    repeat_until: Optional[date] = None

    # Recurrence source fields; always empty on materialized instances
    recurrence_rule: Optional[RecurrenceRule] = None
    recurrence_time: Optional[time] = None
    recurrence_start_date: Optional[date] = None
    recurrence_active: bool = False
    recurrence_parent_id: Optional[UUID] = Field(
        None, description="Template this instance was materialized from"
    )

    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    position: int = 0
    created_at: datetime
    updated_at: datetime

    subtasks: list[Subtask] = Field(default_factory=list)
    attachments: list[Attachment] = Field(default_factory=list)
