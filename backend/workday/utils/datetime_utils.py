"""
Timezone-aware datetime utilities.
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

# UTC timezone constant
UTC = timezone.utc


def now_utc() -> datetime:
    """
    Get current UTC datetime (timezone-aware).

    Returns:
        datetime: Current UTC time with tzinfo set to UTC
    """
    return datetime.now(UTC)


def get_user_today(user_timezone: str) -> date:
    """
    Get today's date in the user's timezone.

    Args:
        user_timezone: IANA timezone name (e.g., "Asia/Tokyo", "America/New_York")

    Returns:
        date: Today's date in the user's timezone

    Example:
        >>> get_user_today("Asia/Tokyo")  # When UTC is 2024-01-19 23:00
        date(2024, 1, 20)  # JST is 2024-01-20 08:00
    """
    tz = ZoneInfo(user_timezone)
    return now_utc().astimezone(tz).date()
