"""
Recurring task models.

Defines the recurring task templates that daily plan tasks are materialized from.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from workday.models.enums import Priority, RecurrenceRule


def _minute_precision(value: Optional[time]) -> Optional[time]:
    # Stored as HH:MM
    if value is not None and (value.second or value.microsecond):
        raise ValueError("time_of_day must not carry seconds (use HH:MM)")
    return value


class RecurringTaskBase(BaseModel):
    """Base fields for recurring task templates."""

    title: str = Field(..., min_length=1, max_length=200)
    category: str = Field(..., min_length=1, max_length=60)
    estimated_minutes: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = Field(None, max_length=4000)
    priority: Priority = Priority.NONE
    rule: RecurrenceRule = RecurrenceRule.WEEKLY
    time_of_day: Optional[time] = Field(
        None, description="Optional local clock time for generated tasks"
    )
    repeat_until: Optional[date] = Field(
        None, description="Inclusive last date the template may occur on"
    )
    is_active: bool = True

    _check_time_of_day = field_validator("time_of_day")(_minute_precision)


class RecurringTaskCreate(RecurringTaskBase):
    """Create a new recurring task template."""

    start_date: date

    @model_validator(mode="after")
    def _check_repeat_until(self) -> "RecurringTaskCreate":
        if self.repeat_until is not None and self.repeat_until < self.start_date:
            raise ValueError("repeat_until must not be before start_date")
        return self


class RecurringTaskUpdate(BaseModel):
    """Update recurring task template fields."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[str] = Field(None, min_length=1, max_length=60)
    estimated_minutes: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = Field(None, max_length=4000)
    priority: Optional[Priority] = None
    rule: Optional[RecurrenceRule] = None
    start_date: Optional[date] = None
    time_of_day: Optional[time] = None
    repeat_until: Optional[date] = None
    is_active: Optional[bool] = None

    _check_time_of_day = field_validator("time_of_day")(_minute_precision)


class RecurringTask(RecurringTaskBase):
    """Recurring task template with metadata."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    workspace_id: str
    # Templates created before anchors were mandatory may lack one; they never match.
    start_date: Optional[date] = None
    parent_template_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


class OccurrencePreview(BaseModel):
    """Dates a template would occur on inside a window."""

    recurring_task_id: UUID
    start: date
    end: date
    dates: list[date]
