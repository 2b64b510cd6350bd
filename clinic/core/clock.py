"""Time helpers.

All timestamps are stored as naive UTC. The clinic timezone is only used to
turn a calendar day into a UTC window.
"""

from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(UTC).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Normalize an aware or naive datetime to naive UTC (naive input is taken as UTC)."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def local_today(tz_name: str, now: datetime | None = None) -> date:
    """Calendar day in the clinic timezone."""
    current = (now or utc_now()).replace(tzinfo=UTC)
    return current.astimezone(ZoneInfo(tz_name)).date()


def day_window(day: date, tz_name: str) -> tuple[datetime, datetime]:
    """
    Local day bounds as a naive UTC window.

    Args:
        day: Calendar day in the clinic timezone
        tz_name: IANA timezone name

    Returns:
        (start, end) covering 00:00:00.000 to 23:59:59.999 local time
    """
    zone = ZoneInfo(tz_name)
    start = datetime.combine(day, time(0, 0, 0, 0), tzinfo=zone)
    end = datetime.combine(day, time(23, 59, 59, 999000), tzinfo=zone)
    return to_naive_utc(start), to_naive_utc(end)
