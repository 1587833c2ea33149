from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo


DEFAULT_TZ = "Europe/London"


def now_local(tz_name: str = DEFAULT_TZ) -> datetime:
    return datetime.now(tz=ZoneInfo(tz_name))


def start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def local_date(dt: datetime, tz_name: str = DEFAULT_TZ) -> date:
    """Calendar date of ``dt`` in ``tz_name``; naive values are taken as already local."""
    if dt.tzinfo is None:
        return dt.date()
    return dt.astimezone(ZoneInfo(tz_name)).date()


def days_since(earlier: datetime, today: date, tz_name: str = DEFAULT_TZ) -> int:
    return (today - local_date(earlier, tz_name)).days


def parse_iso(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def local_day_start(dt: datetime, tz_name: str = DEFAULT_TZ) -> datetime:
    if dt.tzinfo is None:
        return start_of_day(dt)
    return start_of_day(dt.astimezone(ZoneInfo(tz_name)))


def ensure_aware(dt: datetime, tz_name: str = DEFAULT_TZ) -> datetime:
    """Attach ``tz_name`` to naive values so every timestamp written carries an offset."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=ZoneInfo(tz_name))
    return dt
