"""Print the family's upcoming events using the stored session."""
from __future__ import annotations

import argparse
import sys
from typing import Optional

import settings
from auth.session import FileSessionStore, SessionManager
from backend.api_client import BackendClient
from backend.errors import AuthError, OrganiserError
from dashboard.controller import DashboardController
from schedule.formatting import format_long_date, format_time_range


def _default_dashboard() -> DashboardController:
    sessions = SessionManager(FileSessionStore(settings.SESSION_FILE))
    return DashboardController(BackendClient(), sessions)


def run(search: str = "", dashboard: Optional[DashboardController] = None) -> int:
    """Fetch, filter, sort and print upcoming events. Returns an exit code."""
    dashboard = dashboard or _default_dashboard()
    try:
        dashboard.mount()
    except AuthError as exc:
        print("🔒", exc.user_message)
        return 2
    except OrganiserError as exc:
        print("❌", exc.user_message)
        return 1

    events = dashboard.search(search)
    if not events:
        print("No events found. Create your first family event!")
        return 0

    for event in events:
        print(f"📅 {format_long_date(event.date)}  {format_time_range(event.start_time, event.end_time)}")
        print(f"   {event.title}")
        if event.location:
            print(f"   📍 {event.location}")
        if event.required_items:
            print(f"   🎒 {event.required_items}")
    return 0


if __name__ == "__main__":
    settings.configure_logging()
    parser = argparse.ArgumentParser(description="List upcoming family events")
    parser.add_argument("--search", default="", help="Filter by title, location or items")
    args = parser.parse_args()
    sys.exit(run(args.search))
