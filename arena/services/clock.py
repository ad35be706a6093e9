"""
Contest-day arithmetic.

Every day boundary in the app (unlock days, streak days, weekend windows) is
computed in one zone: the contest's ``time_zone``, falling back to
``settings.CONTEST_TIME_ZONE``. Stored datetimes are aware UTC values.
"""
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from django.conf import settings
from django.utils import timezone

SATURDAY = 5
SUNDAY = 6
MONDAY = 0


def contest_zone(contest=None) -> ZoneInfo:
    name = getattr(contest, "time_zone", None) or settings.CONTEST_TIME_ZONE
    return ZoneInfo(name)


def local_date(dt: datetime, tz: ZoneInfo) -> date:
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt, tz)
    return dt.astimezone(tz).date()


def start_of_day(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, datetime.min.time(), tzinfo=tz)


def end_of_day(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, datetime.max.time(), tzinfo=tz)


def days_between(earlier: datetime, later: datetime, tz: ZoneInfo) -> int:
    """Whole calendar days from ``earlier`` to ``later``, ignoring time of day."""
    return (local_date(later, tz) - local_date(earlier, tz)).days


def is_weekend(dt: datetime, tz: ZoneInfo) -> bool:
    return local_date(dt, tz).weekday() in (SATURDAY, SUNDAY)


def weekend_window(dt: datetime, tz: ZoneInfo) -> tuple[datetime, datetime] | None:
    """Saturday 00:00 to Sunday 23:59:59.999999 around ``dt``, or None on weekdays."""
    day = local_date(dt, tz)
    if day.weekday() not in (SATURDAY, SUNDAY):
        return None
    saturday = day - timedelta(days=day.weekday() - SATURDAY)
    return start_of_day(saturday, tz), end_of_day(saturday + timedelta(days=1), tz)


def previous_weekend_window(dt: datetime, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """The most recent weekend window that has fully ended before ``dt``'s day."""
    day = local_date(dt, tz)
    days_back = (day.weekday() - SATURDAY) % 7
    saturday = day - timedelta(days=days_back)
    if days_back <= 1:
        saturday -= timedelta(days=7)
    return start_of_day(saturday, tz), end_of_day(saturday + timedelta(days=1), tz)
