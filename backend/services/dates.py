"""
OGCS CRM - Business calendar

Day and week boundaries in the business timezone (APP_TIMEZONE),
returned as naive UTC datetimes ready for MongoDB range queries.
"""

from datetime import datetime, time, timedelta
from typing import Optional, Tuple

from config import LOCAL_TZ, to_utc
from services.errors import ValidationError

ONE_MS = timedelta(milliseconds=1)


def local_now(now: Optional[datetime] = None) -> datetime:
    """Aware business-local 'now'. Naive input is read as local wall time."""
    if now is None:
        return datetime.now(LOCAL_TZ)
    if now.tzinfo is None:
        return LOCAL_TZ.localize(now)
    return now.astimezone(LOCAL_TZ)


def _local_midnight(day) -> datetime:
    return LOCAL_TZ.localize(datetime.combine(day, time.min))


def day_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """
    [00:00:00.000, 23:59:59.999] of the local day containing now.
    End is computed from the next midnight so DST days stay exact.
    """
    today = local_now(now).date()
    start = _local_midnight(today)
    end = _local_midnight(today + timedelta(days=1)) - ONE_MS
    return to_utc(start), to_utc(end)


def week_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Monday 00:00 to Sunday 23:59:59.999 of the current local week"""
    today = local_now(now).date()
    monday = today - timedelta(days=today.weekday())
    start = _local_midnight(monday)
    end = _local_midnight(monday + timedelta(days=7)) - ONE_MS
    return to_utc(start), to_utc(end)


def parse_date_param(value, label: str, end_of_day: bool = False) -> Optional[datetime]:
    """
    Query-string date -> naive UTC.
    YYYY-MM-DD is a local day (its start, or its end with end_of_day=True);
    full ISO timestamps keep their offset, naive ones are local time.
    """
    if value is None or not str(value).strip():
        return None
    text = str(value).strip()
    try:
        if len(text) == 10:
            day = datetime.strptime(text, "%Y-%m-%d")
            if end_of_day:
                return to_utc(_local_midnight(day.date() + timedelta(days=1)) - ONE_MS)
            return to_utc(day)
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid {label} date")
    return to_utc(parsed)


def utc_day_bounds(value: str) -> Tuple[datetime, datetime]:
    """YYYY-MM-DD as a UTC calendar day (visit list ?date= filter)"""
    try:
        day = datetime.strptime(str(value).strip(), "%Y-%m-%d")
    except ValueError:
        raise ValidationError("Invalid date")
    return day, day + timedelta(days=1) - ONE_MS
