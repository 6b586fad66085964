from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone as dt_tz, tzinfo
from typing import Callable
from zoneinfo import ZoneInfo

from django.utils import timezone


def get_zone(value) -> tzinfo:
    if isinstance(value, tzinfo):
        return value
    if value.upper() == "UTC":
        return dt_tz.utc
    return ZoneInfo(value)


def local_date(moment: datetime, tz: tzinfo) -> date:
    return moment.astimezone(tz).date()


def start_of_day(moment: datetime, tz: tzinfo) -> datetime:
    """Midnight of ``moment``'s calendar day in ``tz``."""
    return day_bounds(local_date(moment, tz), tz)[0]


def day_bounds(day: date, tz: tzinfo):
    """Half-open ``[start, end)`` instants covering ``day`` in ``tz``."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start, end


def to_local_iso(moment, tz: tzinfo):
    if moment is None:
        return None
    return moment.astimezone(tz).isoformat()


@dataclass(frozen=True)
class Clock:
    tz: tzinfo = dt_tz.utc
    now_fn: Callable[[], datetime] = field(default=timezone.now, compare=False)

    def now(self) -> datetime:
        return self.now_fn()

    def today(self, now=None) -> date:
        return local_date(now or self.now(), self.tz)

    def start_of_day(self, now=None) -> datetime:
        return start_of_day(now or self.now(), self.tz)


def get_clock() -> Clock:
    from ..config import load_policy

    return Clock(tz=get_zone(load_policy().time_zone))
