import os
import sys
import time

import jwt
import pytest

# Ensure the project root is on the import path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from backend.errors import AuthorizationError
from backend.schemas import EventRecord, Session


def make_event(event_id, day, start=None, end=None, **fields):
    """Build an EventRecord from backend-shaped JSON."""
    data = {
        "_id": event_id,
        "event": fields.pop("title", f"Event {event_id}"),
        "date": day,
        "startTime": start or "",
        "endTime": end or "",
        "location": fields.pop("location", "Sports Centre"),
        "requiredItems": fields.pop("required_items", ""),
        "organiser": fields.pop("organiser", "alice"),
        "familyId": fields.pop("family_id", "family_abc123"),
    }
    data.update(fields)
    return EventRecord.from_api(data)


def make_token(exp_offset=3600, **claims):
    payload = {"username": "alice", **claims}
    if exp_offset is not None:
        payload["exp"] = int(time.time()) + exp_offset
    return jwt.encode(payload, "family-organiser-test-signing-key-0123456789", algorithm="HS256")


class FakeBackend:
    """In-memory stand-in for BackendClient."""

    def __init__(self, events=None):
        self.events = list(events or [])
        self.fetches = 0
        self.deleted = []
        self.reject_delete = False
        self.login_result = None
        self.login_error = None
        self.login_calls = 0

    def login(self, username, password, family_id):
        self.login_calls += 1
        if self.login_error is not None:
            raise self.login_error
        return self.login_result or Session(
            token=make_token(), username=username, userrole="member", userfamily=family_id
        )

    def register(self, username, password, family_id):
        return None

    def get_family_events(self, family_id, session=None):
        self.fetches += 1
        return [e for e in self.events if e.family_id == family_id]

    def create_event(self, draft, session):
        event = EventRecord(
            id=f"new-{len(self.events) + 1}",
            title=draft.title,
            date=draft.date,
            start_time=draft.start_time,
            end_time=draft.end_time,
            location=draft.location,
            required_items=draft.required_items,
            organiser=session.username,
            family_id=session.userfamily,
        )
        self.events.append(event)
        return {"success": True}

    def update_event(self, event_id, draft, session):
        for index, event in enumerate(self.events):
            if event.id == event_id and event.organiser == session.username:
                self.events[index] = event.with_draft(draft)
                return {"success": True}
        raise AuthorizationError()

    def delete_event(self, event_id, session):
        if self.reject_delete:
            raise AuthorizationError()
        self.deleted.append(event_id)
        self.events = [e for e in self.events if e.id != event_id]


@pytest.fixture
def session():
    return Session(token=make_token(), username="alice", userrole="member", userfamily="family_abc123")
