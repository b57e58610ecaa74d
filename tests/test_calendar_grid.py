from datetime import date

import pytest

from backend.errors import ValidationError
from conftest import make_event
from schedule.calendar_grid import (
    CalendarView,
    build_month_cells,
    days_in_month,
    first_weekday,
    normalize_month,
)


def _day_cells(cells):
    return [cell for cell in cells if not cell.is_placeholder]


def test_february_leap_and_common_years():
    assert len(_day_cells(build_month_cells(2024, 1, []))) == 29
    assert len(_day_cells(build_month_cells(2023, 1, []))) == 28


def test_january_starting_on_wednesday_has_three_placeholders():
    # 1 January 2025 is a Wednesday
    cells = build_month_cells(2025, 0, [])
    assert first_weekday(2025, 0) == 3
    assert [cell.is_placeholder for cell in cells[:4]] == [True, True, True, False]
    assert cells[3].day == 1
    assert len(cells) == 3 + 31


def test_month_lengths():
    assert days_in_month(2025, 3) == 30
    assert days_in_month(2025, 11) == 31


def test_events_are_bucketed_by_date_including_past_ones():
    morning = make_event("a", "2025-03-10", "09:00")
    evening = make_event("b", "2025-03-10", "18:00")
    other = make_event("c", "2025-04-10")
    cells = build_month_cells(2025, 2, [evening, other, morning], today=date(2025, 6, 1))
    tenth = next(cell for cell in cells if cell.day == 10)
    assert tenth.events == [evening, morning]
    assert tenth.has_events
    assert not any(cell.has_events for cell in cells if cell.day != 10)


def test_today_and_selected_flags():
    cells = build_month_cells(
        2025, 2, [], today=date(2025, 3, 5), selected=date(2025, 3, 7)
    )
    assert [c.day for c in cells if c.is_today] == [5]
    assert [c.day for c in cells if c.is_selected] == [7]


@pytest.mark.parametrize(
    "year, month, expected",
    [(2025, 12, (2026, 0)), (2025, -1, (2024, 11)), (2025, 5, (2025, 5)), (2025, 25, (2027, 1))],
)
def test_normalize_month(year, month, expected):
    assert normalize_month(year, month) == expected


def test_navigation_rolls_over_years_and_clears_selection():
    view = CalendarView([], year=2025, month=11, today=date(2025, 12, 1))
    view.select_day(3)
    view.next_month()
    assert (view.year, view.month) == (2026, 0)
    assert view.selected_date is None
    view.previous_month()
    view.previous_month()
    assert (view.year, view.month) == (2025, 10)
    assert view.title == "November 2025"
    view.go_to_today()
    assert (view.year, view.month) == (2025, 11)


def test_selected_day_events_sorted_by_start_time():
    late = make_event("late", "2025-03-10", "18:00")
    early = make_event("early", "2025-03-10", "07:30")
    view = CalendarView([late, early, make_event("x", "2025-03-11")], year=2025, month=2)
    assert [e.id for e in view.select_day(10)] == ["early", "late"]
    assert view.selected_date == date(2025, 3, 10)
    assert [c.day for c in view.cells() if c.is_selected] == [10]


def test_selecting_missing_day_raises():
    view = CalendarView([], year=2023, month=1)
    with pytest.raises(ValidationError):
        view.select_day(29)
