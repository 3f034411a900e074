"""Time helpers for gating and trigger bookkeeping."""

from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from vigil.config import settings


def utc_now() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def to_zone(dt: datetime, tz_name: Optional[str] = None) -> datetime:
    """Convert to the named zone (engine timezone when omitted)."""
    return ensure_aware(dt).astimezone(ZoneInfo(tz_name or settings.engine.timezone))


def sunday_weekday(dt: datetime) -> int:
    """Weekday with Sunday=0 .. Saturday=6."""
    return (dt.weekday() + 1) % 7


def parse_hhmm(value: str) -> int:
    """'HH:MM' -> minutes since midnight."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minute_of_day(dt: datetime) -> int:
    return dt.hour * 60 + dt.minute
