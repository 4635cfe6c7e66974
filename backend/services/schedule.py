"""
schedule.py — Recurrence rules for implementation intentions.
Decides whether a recurring task is due on a given calendar day, and what
"today" means for this deployment (APP_TIMEZONE).
"""

import json
import logging
from datetime import date, datetime, time, timedelta
from enum import IntEnum
from zoneinfo import ZoneInfo

from config import APP_TIMEZONE
from models.task import Periodicity

logger = logging.getLogger(__name__)


class Weekday(IntEnum):
    # Same numbering as date.weekday()
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def of(cls, day: date) -> "Weekday":
        return cls(day.weekday())


# Day names as stored in tasks.custom_days (the UI writes Spanish names).
DAY_NAMES: dict[str, Weekday] = {
    "lunes": Weekday.MONDAY,
    "martes": Weekday.TUESDAY,
    "miércoles": Weekday.WEDNESDAY,
    "miercoles": Weekday.WEDNESDAY,
    "jueves": Weekday.THURSDAY,
    "viernes": Weekday.FRIDAY,
    "sábado": Weekday.SATURDAY,
    "sabado": Weekday.SATURDAY,
    "domingo": Weekday.SUNDAY,
    "monday": Weekday.MONDAY,
    "tuesday": Weekday.TUESDAY,
    "wednesday": Weekday.WEDNESDAY,
    "thursday": Weekday.THURSDAY,
    "friday": Weekday.FRIDAY,
    "saturday": Weekday.SATURDAY,
    "sunday": Weekday.SUNDAY,
}

WEEKLY_ANCHOR = Weekday.MONDAY


def parse_custom_days(raw) -> set[Weekday]:
    """custom_days arrives as None, a list of names, or that list JSON-encoded."""
    if not raw:
        return set()
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring malformed custom_days value: %r", raw)
            return set()
    if not isinstance(raw, (list, tuple, set)):
        return set()

    days = set()
    for name in raw:
        if isinstance(name, Weekday):
            days.add(name)
            continue
        day = DAY_NAMES.get(str(name).strip().lower())
        if day is not None:
            days.add(day)
    return days


def is_due_today(periodicity, custom_days, today: date, *, one_time_due: bool = True) -> bool:
    """
    Whether an intention with this recurrence is due on `today`.

    one_time tasks have no recurrence filter: they count as due unless the
    caller is a recurring-reminder path, which passes one_time_due=False.
    Unknown periodicities are never due.
    """
    try:
        periodicity = Periodicity(periodicity)
    except ValueError:
        return False

    if periodicity is Periodicity.DAILY:
        return True
    if periodicity is Periodicity.WEEKLY:
        return Weekday.of(today) is WEEKLY_ANCHOR
    if periodicity is Periodicity.CUSTOM:
        return Weekday.of(today) in parse_custom_days(custom_days)
    return one_time_due


# ----------------------------------------------------------------------
def app_timezone() -> ZoneInfo:
    return ZoneInfo(APP_TIMEZONE)


def local_today() -> date:
    return datetime.now(app_timezone()).date()


def get_today() -> date:
    """FastAPI dependency — the current calendar day in APP_TIMEZONE."""
    return local_today()


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Aware [start, end) instants of `day` in APP_TIMEZONE."""
    start = datetime.combine(day, time.min, tzinfo=app_timezone())
    return start, start + timedelta(days=1)


def is_same_local_day(moment: datetime | None, day: date) -> bool:
    if moment is None:
        return False
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=app_timezone())
    return moment.astimezone(app_timezone()).date() == day
