"""
Month-grid calendar built from a flat event list.

Months are zero based (0 = January) and weeks start on Sunday. The calendar
is fed the full event list, past events included.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from backend.errors import ValidationError
from backend.schemas import EventRecord
from schedule.filter_sort import sort_by_start_time
from schedule.formatting import DAY_NAMES, month_title


@dataclass
class DayCell:
    """One square of the grid; leading placeholders have ``day is None``."""

    day: Optional[int] = None
    date: Optional[date] = None
    events: List[EventRecord] = field(default_factory=list)
    is_today: bool = False
    is_selected: bool = False

    @property
    def is_placeholder(self) -> bool:
        return self.day is None

    @property
    def has_events(self) -> bool:
        return bool(self.events)


def normalize_month(year: int, month: int) -> Tuple[int, int]:
    """Roll a month index outside 0..11 into the neighbouring year."""
    extra_years, month = divmod(month, 12)
    return year + extra_years, month


def first_weekday(year: int, month: int) -> int:
    """Weekday of the 1st with Sunday = 0."""
    return (date(year, month + 1, 1).weekday() + 1) % 7


def days_in_month(year: int, month: int) -> int:
    # Last day of the month is "day 0" of the following month.
    next_year, next_month = normalize_month(year, month + 1)
    return (date(next_year, next_month + 1, 1) - timedelta(days=1)).day


def group_by_date(events: Iterable[EventRecord]) -> Dict[date, List[EventRecord]]:
    buckets: Dict[date, List[EventRecord]] = defaultdict(list)
    for event in events:
        buckets[event.date].append(event)
    return buckets


def build_month_cells(
    year: int,
    month: int,
    events: Iterable[EventRecord],
    *,
    today: Optional[date] = None,
    selected: Optional[date] = None,
) -> List[DayCell]:
    """Return placeholder cells for the leading weekday offset, then one cell per day."""
    year, month = normalize_month(year, month)
    today = today or date.today()
    buckets = group_by_date(events)

    cells = [DayCell() for _ in range(first_weekday(year, month))]
    for day in range(1, days_in_month(year, month) + 1):
        current = date(year, month + 1, day)
        cells.append(
            DayCell(
                day=day,
                date=current,
                events=list(buckets.get(current, [])),
                is_today=current == today,
                is_selected=current == selected,
            )
        )
    return cells


class CalendarView:
    """Month browser with a selectable day."""

    day_names = DAY_NAMES

    def __init__(
        self,
        events: Iterable[EventRecord],
        year: Optional[int] = None,
        month: Optional[int] = None,
        today: Optional[date] = None,
    ):
        self.events = list(events)
        self._today = today
        start = self.today
        self.year = start.year if year is None else year
        self.month = start.month - 1 if month is None else month
        self.year, self.month = normalize_month(self.year, self.month)
        self.selected_date: Optional[date] = None

    @property
    def today(self) -> date:
        return self._today or date.today()

    @property
    def title(self) -> str:
        return month_title(self.year, self.month)

    def cells(self) -> List[DayCell]:
        return build_month_cells(
            self.year, self.month, self.events, today=self.today, selected=self.selected_date
        )

    def _go_to(self, year: int, month: int) -> None:
        self.year, self.month = normalize_month(year, month)
        self.selected_date = None

    def previous_month(self) -> None:
        self._go_to(self.year, self.month - 1)

    def next_month(self) -> None:
        self._go_to(self.year, self.month + 1)

    def go_to_today(self) -> None:
        self._go_to(self.today.year, self.today.month - 1)

    def select_day(self, day: int) -> List[EventRecord]:
        """Select ``day`` of the shown month and return its events by start time."""
        if not 1 <= day <= days_in_month(self.year, self.month):
            raise ValidationError([f"{self.title} has no day {day}"])
        self.selected_date = date(self.year, self.month + 1, day)
        return self.selected_events()

    def events_for(self, value: date) -> List[EventRecord]:
        return [event for event in self.events if event.date == value]

    def selected_events(self) -> List[EventRecord]:
        if self.selected_date is None:
            return []
        return sort_by_start_time(self.events_for(self.selected_date))
