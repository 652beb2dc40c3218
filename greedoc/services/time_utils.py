from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple

import pytz

from greedoc.core.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clinic_tz():
    return pytz.timezone(settings.CLINIC_TIMEZONE)


def local_today(now: Optional[datetime] = None) -> date:
    """The calendar date at the clinic for ``now`` (default: the current time)."""
    return (now or utcnow()).astimezone(clinic_tz()).date()


def as_utc(value) -> Optional[datetime]:
    """
    Coerce a stored timestamp into an aware UTC datetime.

    Accepts:
        - datetime (naive values are treated as UTC)
        - date (midnight UTC)
        - ISO string "YYYY-MM-DD" or full ISO timestamp
        - Firestore timestamps exposing ``.datetime``
    Returns None when the value cannot be interpreted.
    """
    if value is None:
        return None
    if hasattr(value, "datetime") and not isinstance(value, datetime):
        value = value.datetime
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return as_utc(parsed)
    return None


def parse_date(value) -> Optional[date]:
    """Return the calendar date of a "YYYY-MM-DD" string, date or datetime."""
    if isinstance(value, datetime):
        return as_utc(value).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def combine_date_time(day, hhmm: Optional[str]) -> Optional[datetime]:
    """
    Build a UTC datetime from a date and an "HH:MM" clinic wall-clock time
    (midnight if absent).
    """
    d = parse_date(day)
    if d is None:
        return None
    t = time.min
    if hhmm:
        try:
            hour, minute = hhmm.split(":")[:2]
            t = time(int(hour), int(minute))
        except ValueError:
            t = time.min
    local = clinic_tz().localize(datetime.combine(d, t))
    return local.astimezone(timezone.utc)


def age_from_birth_date(value, today: Optional[date] = None) -> Optional[int]:
    born = parse_date(value)
    if born is None:
        return None
    today = today or local_today()
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


def week_range(day: date) -> Tuple[date, date]:
    """Sunday through Saturday of the week containing ``day``."""
    # weekday(): monday = 0, sunday = 6
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def month_range(day: date) -> Tuple[date, date]:
    first = day.replace(day=1)
    next_first = (first + timedelta(days=32)).replace(day=1)
    return first, next_first - timedelta(days=1)
