"""Dashboard state: the family's upcoming events and the actions on them."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional

from auth.session import SessionManager
from backend.api_client import BackendClient
from backend.errors import AuthorizationError, NetworkError
from backend.schemas import EventDraft, EventRecord, Session
from maps.map_view import MapView
from schedule.calendar_grid import CalendarView
from schedule.filter_sort import filter_upcoming, search_events, sort_by_date_then_time

logger = logging.getLogger(__name__)

DELETE_FAILED = "Failed to delete event. You can only delete events you created."
UPDATE_FAILED = "Failed to update event. You can only edit events you created."


class DashboardController:
    """Fetch, filter, sort and search the family's events.

    ``all_events`` is the unfiltered fetch (the calendar shows it), ``events``
    the upcoming events in date order, and ``visible_events`` the latter
    narrowed by the current search term.
    """

    def __init__(
        self,
        client: BackendClient,
        sessions: SessionManager,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.client = client
        self.sessions = sessions
        self.clock = clock
        self.session: Optional[Session] = None
        self.all_events: List[EventRecord] = []
        self.events: List[EventRecord] = []
        self.visible_events: List[EventRecord] = []
        self.search_term = ""
        self.loading = False

    def mount(self) -> List[EventRecord]:
        """Check the session, then load events. Raises ``AuthError`` when logged out."""
        self.session = self.sessions.require()
        return self.refresh()

    def _require_session(self) -> Session:
        if self.session is None:
            self.session = self.sessions.require()
        return self.session

    def refresh(self) -> List[EventRecord]:
        session = self._require_session()
        self.loading = True
        try:
            fetched = self.client.get_family_events(session.userfamily, session)
        finally:
            self.loading = False
        self._set_events(fetched)
        return self.visible_events

    def _set_events(self, events: List[EventRecord]) -> None:
        self.all_events = list(events)
        self.events = sort_by_date_then_time(filter_upcoming(self.all_events, self.clock()))
        self.visible_events = search_events(self.events, self.search_term)

    def search(self, term: str) -> List[EventRecord]:
        self.search_term = term or ""
        self.visible_events = search_events(self.events, self.search_term)
        return self.visible_events

    def get_event(self, event_id: str) -> Optional[EventRecord]:
        return next((e for e in self.all_events if e.id == event_id), None)

    def can_modify(self, event: EventRecord) -> bool:
        """Only the organiser sees edit and delete. The backend re-checks."""
        return self.session is not None and event.organiser == self.session.username

    def create_event(self, draft: EventDraft) -> List[EventRecord]:
        session = self._require_session()
        result = self.client.create_event(draft, session)
        pending = EventRecord(
            id=str(result.get("id") or result.get("_id") or ""),
            title=draft.title,
            date=draft.date,
            start_time=draft.start_time,
            end_time=draft.end_time,
            location=draft.location,
            required_items=draft.required_items,
            organiser=session.username,
            family_id=session.userfamily,
        )
        self._set_events(self.all_events + [pending])
        return self.refresh()

    def update_event(self, event_id: str, draft: EventDraft) -> List[EventRecord]:
        session = self._require_session()
        try:
            self.client.update_event(event_id, draft, session)
        except NetworkError as exc:
            logger.warning("Updating event %s failed: %s", event_id, exc)
            raise AuthorizationError(UPDATE_FAILED) from exc
        self._set_events(
            [e.with_draft(draft) if e.id == event_id else e for e in self.all_events]
        )
        return self.refresh()

    def delete_event(self, event_id: str, confirm: Callable[[], bool]) -> bool:
        """Delete after ``confirm()`` agrees; returns ``False`` when declined."""
        if not confirm():
            return False
        session = self._require_session()
        try:
            self.client.delete_event(event_id, session)
        except NetworkError as exc:
            logger.warning("Deleting event %s failed: %s", event_id, exc)
            raise AuthorizationError(DELETE_FAILED) from exc
        self._set_events([e for e in self.all_events if e.id != event_id])
        self.refresh()
        return True

    def calendar(self, year: Optional[int] = None, month: Optional[int] = None) -> CalendarView:
        return CalendarView(self.all_events, year=year, month=month, today=self.clock().date())

    def map_for(self, event_id: str) -> Optional[MapView]:
        event = self.get_event(event_id)
        return MapView(event) if event else None

    def logout(self) -> None:
        self.sessions.clear()
        self.session = None
        self.all_events = self.events = self.visible_events = []
