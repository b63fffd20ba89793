"""Date/time picker model.

The composite date-time control stores a single ``YYYY-MM-DDTHH:mm`` value.
Picking a day keeps the chosen time (09:00 when none is set); picking a
time keeps the chosen day (today when none is set). Time slots are 30
minutes apart and slots in the past are disabled when the selected day is
today. Past calendar days are disabled.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

VALUE_FORMAT = "%Y-%m-%dT%H:%M"
VALUE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}$")
SLOT_MINUTES = 30
DEFAULT_TIME = time(9, 0)


@dataclass(frozen=True)
class TimeSlot:
    value: str
    label: str
    disabled: bool = False


@dataclass(frozen=True)
class CalendarDay:
    day: date
    in_month: bool
    is_past: bool
    is_today: bool
    is_selected: bool = False


def format_value(value: datetime) -> str:
    """Format a datetime as the hidden input value.

    Examples:
        >>> format_value(datetime(2025, 3, 7, 14, 30))
        '2025-03-07T14:30'
    """
    return value.strftime(VALUE_FORMAT)


def parse_value(value: Optional[str]) -> Optional[datetime]:
    """Parse a hidden input value; malformed values parse as None.

    Examples:
        >>> parse_value("2025-03-07T14:30")
        datetime.datetime(2025, 3, 7, 14, 30)
        >>> parse_value("tomorrow") is None
        True
    """
    if not value or not VALUE_PATTERN.match(value):
        return None
    try:
        return date_parser.isoparse(value)
    except ValueError:
        return None


def slot_label(slot: time) -> str:
    """12-hour label of a slot.

    Examples:
        >>> slot_label(time(0, 0))
        '12:00 AM'
        >>> slot_label(time(13, 30))
        '1:30 PM'
    """
    hour = slot.hour % 12 or 12
    suffix = "AM" if slot.hour < 12 else "PM"
    return f"{hour}:{slot.minute:02d} {suffix}"


def time_slots(selected_day: Optional[date] = None, now: Optional[datetime] = None) -> List[TimeSlot]:
    """The 48 half-hour slots of a day.

    Slots before ``now`` are disabled when ``selected_day`` is today.
    """
    slots: List[TimeSlot] = []
    start = datetime.combine(selected_day or date.today(), time(0, 0))
    is_today = selected_day is not None and now is not None and selected_day == now.date()
    for index in range(24 * 60 // SLOT_MINUTES):
        moment = start + timedelta(minutes=index * SLOT_MINUTES)
        slots.append(TimeSlot(
            value=moment.strftime("%H:%M"),
            label=slot_label(moment.time()),
            disabled=is_today and moment < now,
        ))
    return slots


def pick_date(current: Optional[str], day: date) -> str:
    """New value after choosing ``day`` in the calendar.

    Examples:
        >>> pick_date(None, date(2025, 3, 7))
        '2025-03-07T09:00'
        >>> pick_date("2025-01-01T18:30", date(2025, 3, 7))
        '2025-03-07T18:30'
    """
    existing = parse_value(current)
    chosen_time = existing.time() if existing else DEFAULT_TIME
    return format_value(datetime.combine(day, chosen_time))


def pick_time(current: Optional[str], slot_value: str, today: Optional[date] = None) -> str:
    """New value after choosing a time slot (``HH:MM``).

    Examples:
        >>> pick_time("2025-03-07T09:00", "17:30")
        '2025-03-07T17:30'
        >>> pick_time(None, "08:00", today=date(2025, 3, 1))
        '2025-03-01T08:00'
    """
    existing = parse_value(current)
    day = existing.date() if existing else (today or date.today())
    hours, minutes = (int(part) for part in slot_value.split(":"))
    return format_value(datetime.combine(day, time(hours, minutes)))


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move a displayed month forwards or backwards.

    Examples:
        >>> shift_month(2025, 12, 1)
        (2026, 1)
        >>> shift_month(2025, 1, -1)
        (2024, 12)
    """
    moved = date(year, month, 1) + relativedelta(months=delta)
    return moved.year, moved.month


def calendar_month(
    year: int,
    month: int,
    today: Optional[date] = None,
    selected: Optional[str] = None,
) -> List[List[CalendarDay]]:
    """Weeks (Sunday first) of the month grid with past days flagged."""
    today = today or date.today()
    chosen = parse_value(selected)
    chosen_day = chosen.date() if chosen else None
    grid = calendar.Calendar(firstweekday=calendar.SUNDAY).monthdatescalendar(year, month)
    return [
        [
            CalendarDay(
                day=day,
                in_month=day.month == month,
                is_past=day < today,
                is_today=day == today,
                is_selected=day == chosen_day,
            )
            for day in week
        ]
        for week in grid
    ]


def display_date(value: Optional[str]) -> Optional[str]:
    """Human-readable day of a value, e.g. ``Fri, Mar 7, 2025``."""
    parsed = parse_value(value)
    if parsed is None:
        return None
    return f"{parsed:%a, %b} {parsed.day}, {parsed.year}"


def display_time(value: Optional[str]) -> Optional[str]:
    parsed = parse_value(value)
    return slot_label(parsed.time()) if parsed else None


__all__ = [
    "VALUE_FORMAT",
    "SLOT_MINUTES",
    "DEFAULT_TIME",
    "TimeSlot",
    "CalendarDay",
    "format_value",
    "parse_value",
    "slot_label",
    "time_slots",
    "pick_date",
    "pick_time",
    "shift_month",
    "calendar_month",
    "display_date",
    "display_time",
]
