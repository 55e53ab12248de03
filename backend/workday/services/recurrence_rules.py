"""
Recurrence rule evaluation.

Pure calendar logic deciding whether a recurring task template occurs on a
given date. Nothing here touches storage.

Weekdays follow ``date.weekday()`` (0=Monday ... 6=Sunday).
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterator, Optional

from workday.models.enums import RecurrenceRule

# Ordinal used by MONTHLY_NTH_WEEKDAY regardless of the anchor's own ordinal
NTH_WEEKDAY_ORDINAL = 2


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end inclusive."""
    cursor = start
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)


def is_weekday(day: date) -> bool:
    """Monday through Friday."""
    return day.weekday() < 5


def weekday_occurrence_in_month(day: date) -> int:
    """
    Ordinal of day's weekday within its month (1 for the first Monday, ...).

    Counts matching weekdays from the 1st of the month forward.
    """
    count = 0
    cursor = day.replace(day=1)
    while cursor.month == day.month:
        if cursor.weekday() == day.weekday():
            count += 1
            if cursor == day:
                return count
        cursor += timedelta(days=1)
    return 0


def matches(
    rule: RecurrenceRule | str | None,
    start_date: Optional[date],
    candidate: date,
) -> bool:
    """
    Check whether a rule anchored at start_date fires on candidate.

    Args:
        rule: Rule member or its stored string value
        start_date: Anchor date the pattern is computed from
        candidate: Date being tested

    Returns:
        True if the template occurs on candidate. Dates before the anchor,
        missing anchors, CUSTOM, NONE and unrecognized rules never match.
    """
    parsed = RecurrenceRule.parse(rule)
    if parsed is None or start_date is None:
        return False
    if candidate < start_date:
        return False

    same_weekday = start_date.weekday() == candidate.weekday()

    if parsed == RecurrenceRule.DAILY_WEEKDAYS:
        return is_weekday(candidate)

    if parsed == RecurrenceRule.WEEKLY:
        return same_weekday

    if parsed == RecurrenceRule.BIWEEKLY:
        return same_weekday and (candidate - start_date).days % 14 == 0

    if parsed == RecurrenceRule.MONTHLY:
        return same_weekday and (
            weekday_occurrence_in_month(candidate)
            == weekday_occurrence_in_month(start_date)
        )

    if parsed == RecurrenceRule.MONTHLY_NTH_WEEKDAY:
        return same_weekday and weekday_occurrence_in_month(candidate) == NTH_WEEKDAY_ORDINAL

    if parsed == RecurrenceRule.QUARTERLY:
        return (
            same_weekday
            and weekday_occurrence_in_month(candidate)
            == weekday_occurrence_in_month(start_date)
            and (candidate.month - start_date.month + 12) % 3 == 0
        )

    if parsed == RecurrenceRule.YEARLY:
        return (
            same_weekday
            and weekday_occurrence_in_month(candidate)
            == weekday_occurrence_in_month(start_date)
            and candidate.month == start_date.month
        )

    if parsed == RecurrenceRule.SPECIFIC_TIME:
        # Only the time of day is constrained
        return True

    # CUSTOM and NONE
    return False


def occurrences_between(
    rule: RecurrenceRule | str | None,
    start_date: Optional[date],
    first: date,
    last: date,
    repeat_until: Optional[date] = None,
) -> list[date]:
    """List the dates in [first, last] a rule fires on, honoring repeat_until."""
    if repeat_until is not None and repeat_until < last:
        last = repeat_until
    return [day for day in iter_dates(first, last) if matches(rule, start_date, day)]
