# app/utils/clock.py
"""
UTC time helpers. Every timestamp PayTrack writes is timezone-aware UTC;
values read back from databases without timezone support come back naive
and are taken as UTC.
"""
from datetime import date, datetime, time, timedelta, timezone

UTC_MIN = datetime.min.replace(tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_day_bounds(day: date | datetime) -> tuple[datetime, datetime]:
    """[start, end) of the UTC calendar day containing `day`."""
    if isinstance(day, datetime):
        day = as_utc(day).date()
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)
