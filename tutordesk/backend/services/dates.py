"""
Calendar helpers. Attendance days and monthly income are computed in the
timezone from settings.TIMEZONE.
"""
import calendar
from datetime import date, datetime, time, timedelta
from typing import List, Tuple, Union
from zoneinfo import ZoneInfo

from ..config.config import settings


def local_timezone() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def now() -> datetime:
    return datetime.now(local_timezone())


def today() -> date:
    return now().date()


def normalize_day(value: Union[date, datetime]) -> date:
    """Drops the time of day. Aware datetimes are converted to the local zone first."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(local_timezone())
        return value.date()
    return value


def as_aware(value: datetime) -> datetime:
    """Naive datetimes are taken to be local time."""
    if value.tzinfo is None:
        return value.replace(tzinfo=local_timezone())
    return value


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=local_timezone())


def month_days(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def month_range(day: date) -> Tuple[datetime, datetime]:
    """Half-open [first day, first day of next month) as aware datetimes."""
    first, last = month_days(day.year, day.month)
    return start_of_day(first), start_of_day(last + timedelta(days=1))


def month_label(day: date) -> str:
    """'January 2024'"""
    return day.strftime("%B %Y")


def short_day_label(day: date) -> str:
    """'Jan 5'"""
    return f"{day.strftime('%b')} {day.day}"


def last_days(count: int, end: date) -> List[date]:
    """The `count` days ending at `end` (inclusive), oldest first."""
    return [end - timedelta(days=offset) for offset in range(count - 1, -1, -1)]
