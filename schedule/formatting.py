"""Human-readable dates and times for event cards, the calendar and maps."""
from __future__ import annotations

from datetime import date, time
from typing import Optional

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
_WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def format_long_date(value: date) -> str:
    """``date(2025, 3, 10)`` -> ``"Monday, 10 March 2025"``."""
    return f"{_WEEKDAY_NAMES[value.weekday()]}, {value.day} {MONTH_NAMES[value.month - 1]} {value.year}"


def format_time_12h(value: Optional[time]) -> str:
    if value is None:
        return ""
    hour12 = value.hour % 12 or 12
    suffix = "PM" if value.hour >= 12 else "AM"
    return f"{hour12}:{value.minute:02d} {suffix}"


def format_time_range(start: Optional[time], end: Optional[time]) -> str:
    if start is None:
        return ""
    if end is None:
        return format_time_12h(start)
    return f"{format_time_12h(start)} - {format_time_12h(end)}"


def month_title(year: int, month: int) -> str:
    """Zero-based ``month``: ``month_title(2025, 2)`` -> ``"March 2025"``."""
    return f"{MONTH_NAMES[month]} {year}"
