from datetime import date, datetime

import pytest

from auth.session import SessionManager
from backend.errors import NetworkError
from conftest import FakeBackend, make_event
from dashboard.controller import DashboardController
from jobs import show_calendar, upcoming_events
from schedule.calendar_grid import CalendarView

NOW = datetime(2025, 3, 10, 12, 0)


@pytest.fixture
def sessions(session):
    manager = SessionManager()
    manager.save(session)
    return manager


def _dashboard(events, sessions):
    return DashboardController(FakeBackend(events), sessions, clock=lambda: NOW)


def test_upcoming_events_prints_sorted_cards(sessions, capsys):
    events = [
        make_event("b", "2025-03-12", "09:00", title="Dentist"),
        make_event("a", "2025-03-11", "14:00", "15:00", title="Swimming", required_items="Towel"),
        make_event("old", "2025-03-01", title="Old news"),
    ]
    assert upcoming_events.run(dashboard=_dashboard(events, sessions)) == 0
    out = capsys.readouterr().out
    assert out.index("Swimming") < out.index("Dentist")
    assert "Tuesday, 11 March 2025  2:00 PM - 3:00 PM" in out
    assert "🎒 Towel" in out
    assert "Old news" not in out


def test_upcoming_events_search_and_empty_message(sessions, capsys):
    events = [make_event("a", "2025-03-11", title="Swimming")]
    assert upcoming_events.run("picnic", dashboard=_dashboard(events, sessions)) == 0
    assert "No events found" in capsys.readouterr().out


def test_upcoming_events_exit_codes(sessions, capsys):
    assert upcoming_events.run(dashboard=_dashboard([], SessionManager())) == 2
    assert "🔒" in capsys.readouterr().out

    dashboard = _dashboard([], sessions)

    def fail(*args, **kwargs):
        raise NetworkError("Failed to load events. Please try again.")

    dashboard.client.get_family_events = fail
    assert upcoming_events.run(dashboard=dashboard) == 1
    assert "Failed to load events" in capsys.readouterr().out


def test_render_month_keeps_columns_aligned():
    # 1 March 2025 is a Saturday; today (the 10th) has an event
    view = CalendarView([make_event("a", "2025-03-10")], year=2025, month=2, today=date(2025, 3, 10))
    lines = show_calendar.render_month(view).splitlines()
    assert lines[0].strip() == "March 2025"
    assert lines[1].split() == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
    rows = lines[2:]
    assert len(rows) == 6
    assert rows[0].rstrip().endswith("1")
    assert "[10*]" in rows[2]
    assert {len(row) for row in rows[:-1]} == {len(lines[1])}


def test_show_calendar_lists_events_by_day(sessions, capsys):
    events = [
        make_event("late", "2025-03-10", "18:00", title="Dinner"),
        make_event("early", "2025-03-10", "07:30", title="Run"),
        make_event("april", "2025-04-02", title="Elsewhere"),
    ]
    assert show_calendar.run(2025, 3, dashboard=_dashboard(events, sessions)) == 0
    out = capsys.readouterr().out
    assert "2025-03-10   7:30 AM  Run" in out
    assert out.index("Run") < out.index("Dinner")
    assert "Elsewhere" not in out


def test_show_calendar_requires_login(capsys):
    assert show_calendar.run(dashboard=_dashboard([], SessionManager())) == 2
