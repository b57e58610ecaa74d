"""Upcoming-event filtering, ordering and text search."""
from __future__ import annotations

from datetime import date, datetime, time
from typing import Iterable, List, Tuple

from backend.schemas import EventRecord


def _local_today_and_minute(now: datetime) -> Tuple[date, time]:
    """Split ``now`` into the local calendar date and an ``HH:MM`` time."""
    if now.tzinfo is not None:
        now = now.astimezone()
    return now.date(), now.time().replace(second=0, microsecond=0)


def is_upcoming(event: EventRecord, today: date, current_time: time) -> bool:
    """An event is upcoming until its end (or, lacking an end, its start) passes."""
    if event.date > today:
        return True
    if event.date < today:
        return False
    if event.end_time is not None:
        return event.end_time > current_time
    if event.start_time is not None:
        return event.start_time > current_time
    return True


def filter_upcoming(events: Iterable[EventRecord], now: datetime) -> List[EventRecord]:
    """Drop events that have already finished relative to ``now``."""
    today, current_time = _local_today_and_minute(now)
    return [event for event in events if is_upcoming(event, today, current_time)]


def _date_time_key(event: EventRecord) -> tuple:
    # Events without a start time go first on their day.
    return (event.date, event.start_time is not None, event.start_time or time.min)


def sort_by_date_then_time(events: Iterable[EventRecord]) -> List[EventRecord]:
    """Stable ascending sort by date, then start time."""
    return sorted(events, key=_date_time_key)


def sort_by_start_time(events: Iterable[EventRecord]) -> List[EventRecord]:
    return sorted(events, key=lambda e: (e.start_time is not None, e.start_time or time.min))


def search_events(events: Iterable[EventRecord], term: str) -> List[EventRecord]:
    """Case-insensitive substring search over title, location and required items."""
    needle = (term or "").strip().lower()
    events = list(events)
    if not needle:
        return events
    return [
        event
        for event in events
        if needle in event.title.lower()
        or needle in event.location.lower()
        or needle in event.required_items.lower()
    ]
