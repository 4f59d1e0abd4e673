from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo


class TimePolicyError(ValueError):
    pass


def localize(dt: datetime, tz_name: str) -> datetime:
    """
    Policy:
    - naive datetimes are local wall time in tz_name
    - aware datetimes are converted to tz_name
    Always returns an aware datetime.
    """
    tz = ZoneInfo(tz_name)
    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def to_utc(dt: datetime, tz_name: str) -> datetime:
    return localize(dt, tz_name).astimezone(timezone.utc)


def minutes_between(later: datetime, earlier: datetime, tz_name: str) -> float:
    """Real elapsed minutes (DST-safe); negative if `later` is before `earlier`."""
    delta = to_utc(later, tz_name) - to_utc(earlier, tz_name)
    return delta.total_seconds() / 60.0


def local_date(dt: datetime, tz_name: str) -> date:
    return localize(dt, tz_name).date()


def hour_of_day(dt: datetime, tz_name: str) -> float:
    """Fractional local hour, minute resolution (08:18 -> 8.3)."""
    local = localize(dt, tz_name)
    return local.hour + local.minute / 60.0


def clock_str(dt: datetime, tz_name: str) -> str:
    # "H:MM" without leading zero on the hour
    local = localize(dt, tz_name)
    return f"{local.hour}:{local.minute:02d}"


def day_bounds(day: date, tz_name: str) -> tuple[datetime, datetime]:
    tz = ZoneInfo(tz_name)
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start, end


def require_now(now: datetime | None, field_name: str) -> datetime:
    if now is None:
        raise TimePolicyError(f"{field_name} is required when building today's plan")
    return now


def epoch_ms(dt: datetime, tz_name: str) -> int:
    return int(to_utc(dt, tz_name).timestamp() * 1000)
