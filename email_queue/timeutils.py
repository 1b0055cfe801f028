"""Timezone helpers for hour slots and wall-clock scheduling."""

import re
from datetime import UTC, date, datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_OFFSET_PATTERN = re.compile(r"^UTC([+-])(\d{1,2})(?::?(\d{2}))?$", re.IGNORECASE)


@lru_cache(maxsize=32)
def parse_timezone(name: str) -> tzinfo:
    """Resolve an IANA zone name or a fixed ``UTC+HH[:MM]`` offset.

    Args:
        name: e.g. ``"Africa/Johannesburg"``, ``"UTC"`` or ``"UTC+02:00"``.

    Returns:
        The matching tzinfo.

    Raises:
        ValueError: If the name is neither a known zone nor a valid offset.
    """
    cleaned = name.strip()
    match = _OFFSET_PATTERN.match(cleaned)
    if match:
        sign, hours, minutes = match.groups()
        offset = timedelta(hours=int(hours), minutes=int(minutes or 0))
        if offset >= timedelta(hours=24):
            raise ValueError(f"Invalid UTC offset: {name}")
        return timezone(-offset if sign == "-" else offset, cleaned.upper())
    try:
        return ZoneInfo(cleaned)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name}") from e


def to_local(moment: datetime, tz: tzinfo) -> datetime:
    """Convert an aware (or naive UTC) datetime to the given timezone."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(tz)


def hour_slot(moment: datetime, tz: tzinfo) -> str:
    """Return the ``HH:00`` slot key for ``moment`` in ``tz``."""
    return f"{to_local(moment, tz).hour:02d}:00"


def local_day(moment: datetime, tz: tzinfo) -> date:
    """Return the calendar day of ``moment`` in ``tz``."""
    return to_local(moment, tz).date()


def local_day_bounds(day: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """Return the UTC start (inclusive) and end (exclusive) of a local day."""
    start = datetime(day.year, day.month, day.day, tzinfo=tz)
    end = start + timedelta(days=1)
    return start.astimezone(UTC), end.astimezone(UTC)


def seconds_until_next_hour(moment: datetime, tz: tzinfo) -> float:
    """Seconds from ``moment`` until the next top of the hour in ``tz``."""
    local = to_local(moment, tz)
    next_hour = local.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)
    return max((next_hour.astimezone(UTC) - local.astimezone(UTC)).total_seconds(), 0.0)


def seconds_until_daily(moment: datetime, tz: tzinfo, hour: int, minute: int) -> float:
    """Seconds from ``moment`` until the next ``hour:minute`` wall-clock time in ``tz``."""
    local = to_local(moment, tz)
    target = local.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= local:
        target = (target + timedelta(days=1)).replace(hour=hour, minute=minute)
    return max((target.astimezone(UTC) - local.astimezone(UTC)).total_seconds(), 0.0)
