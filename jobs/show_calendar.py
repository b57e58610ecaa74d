"""Print a month of family events as a text calendar."""
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

import settings
from auth.session import FileSessionStore, SessionManager
from backend.api_client import BackendClient
from backend.errors import AuthError, OrganiserError
from dashboard.controller import DashboardController
from schedule.calendar_grid import CalendarView, DayCell
from schedule.formatting import format_time_12h


CELL_WIDTH = 5  # widest label is "[31*]"


def render_month(view: CalendarView) -> str:
    """Render the grid; ``*`` marks days with events, ``[ ]`` marks today."""
    width = CELL_WIDTH * 7 + 6
    lines = [view.title.center(width), " ".join(f"{name:>{CELL_WIDTH}}" for name in view.day_names)]
    cells: List[DayCell] = view.cells()
    for start in range(0, len(cells), 7):
        row = []
        for cell in cells[start:start + 7]:
            if cell.is_placeholder:
                row.append(" " * CELL_WIDTH)
                continue
            label = f"{cell.day}{'*' if cell.has_events else ''}"
            if cell.is_today:
                label = f"[{label}]"
            row.append(f"{label:>{CELL_WIDTH}}")
        lines.append(" ".join(row))
    return "\n".join(lines)


def run(
    year: Optional[int] = None,
    month: Optional[int] = None,
    dashboard: Optional[DashboardController] = None,
) -> int:
    """Print the month grid and each day's events. Returns an exit code."""
    if dashboard is None:
        dashboard = DashboardController(BackendClient(), SessionManager(FileSessionStore(settings.SESSION_FILE)))
    try:
        dashboard.mount()
    except AuthError as exc:
        print("🔒", exc.user_message)
        return 2
    except OrganiserError as exc:
        print("❌", exc.user_message)
        return 1

    view = dashboard.calendar(year, None if month is None else month - 1)
    print(render_month(view))
    for cell in view.cells():
        if cell.has_events:
            view.select_day(cell.day)
            for event in view.selected_events():
                print(f"{cell.date.isoformat()}  {format_time_12h(event.start_time):>8}  {event.title}")
    return 0


if __name__ == "__main__":
    settings.configure_logging()
    parser = argparse.ArgumentParser(description="Show a month of family events")
    parser.add_argument("--year", type=int, default=None)
    parser.add_argument("--month", type=int, default=None, help="1-12")
    args = parser.parse_args()
    sys.exit(run(args.year, args.month))
