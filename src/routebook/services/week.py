"""Calendar helpers for the weekly attendance cycle.

Week keys are anchored on January 1st with Sunday-start weeks. They are not
ISO-8601 week numbers: Jan 1 is always week 01 and the last days of December
can land in week 53 or 54.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Optional

from ..models.domain import DayOfWeek

DAYS_OF_WEEK: tuple[DayOfWeek, ...] = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

DAY_LABELS: dict[str, str] = {
    "monday": "Segunda",
    "tuesday": "Terça",
    "wednesday": "Quarta",
    "thursday": "Quinta",
    "friday": "Sexta",
    "saturday": "Sábado",
    "sunday": "Domingo",
}


def sunday_index(moment: datetime) -> int:
    """Weekday index with 0 = Sunday ... 6 = Saturday."""

    return (moment.weekday() + 1) % 7


def compute_week_key(now: datetime) -> str:
    """Return the ``"{year}-{week:02d}"`` key of the calendar week containing ``now``."""

    year = now.year
    first_day = now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    days_since_first_day = (now - first_day).days
    week_number = math.ceil((days_since_first_day + sunday_index(first_day) + 1) / 7)
    return f"{year}-{week_number:02d}"


def current_day_of_week(now: Optional[datetime] = None) -> DayOfWeek:
    moment = now or datetime.now()
    return DAYS_OF_WEEK[sunday_index(moment)]


def format_day_name(day: str) -> str:
    return DAY_LABELS.get(day, day)
