"""Data models exchanged with the family events backend."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from typing import Any, Optional

from backend.errors import ValidationError


def parse_date(value: Any) -> date:
    """Parse a ``YYYY-MM-DD`` string (or pass a ``date`` through)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError([f"Invalid event date: {value!r}"])
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError as exc:
        raise ValidationError([f"Invalid event date: {value!r}"]) from exc


def parse_time(value: Any) -> Optional[time]:
    """Parse an ``HH:MM`` string to a minute-precision ``time``.

    Empty strings and ``None`` mean "no time given".
    """
    if value is None:
        return None
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    text = str(value).strip()
    if not text:
        return None
    try:
        hours, minutes = text.split(":")[:2]
        return time(int(hours), int(minutes))
    except ValueError as exc:
        raise ValidationError([f"Invalid time: {value!r}"]) from exc


def format_time(value: Optional[time]) -> str:
    return value.strftime("%H:%M") if value else ""


@dataclass
class EventDraft:
    """Editable fields of an event, used by the add and edit flows."""

    title: str
    date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: str = ""
    required_items: str = ""

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            raise ValidationError(["Event name is required"])
        self.date = parse_date(self.date)
        self.start_time = parse_time(self.start_time)
        self.end_time = parse_time(self.end_time)

    def to_api(self) -> dict[str, str]:
        return {
            "event": self.title,
            "date": self.date.isoformat(),
            "startTime": format_time(self.start_time),
            "endTime": format_time(self.end_time),
            "location": self.location,
            "requiredItems": self.required_items,
        }


@dataclass
class EventRecord:
    """One family event as returned by ``/get-family-events``."""

    id: str
    title: str
    date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: str = ""
    required_items: str = ""
    organiser: str = ""
    family_id: str = ""
    extra: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "EventRecord":
        known = {
            "_id", "id", "event", "title", "name", "date", "startTime", "endTime",
            "location", "requiredItems", "organiser", "familyId", "userfamily",
        }
        return cls(
            id=str(data.get("_id") or data.get("id") or ""),
            title=data.get("event") or data.get("title") or data.get("name") or "",
            date=parse_date(data.get("date")),
            start_time=parse_time(data.get("startTime")),
            end_time=parse_time(data.get("endTime")),
            location=data.get("location") or "",
            required_items=data.get("requiredItems") or "",
            organiser=data.get("organiser") or "",
            family_id=data.get("familyId") or data.get("userfamily") or "",
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_api(self) -> dict[str, Any]:
        return {
            "_id": self.id,
            "event": self.title,
            "date": self.date.isoformat(),
            "startTime": format_time(self.start_time),
            "endTime": format_time(self.end_time),
            "location": self.location,
            "requiredItems": self.required_items,
            "organiser": self.organiser,
            "familyId": self.family_id,
        }

    def with_draft(self, draft: EventDraft) -> "EventRecord":
        """Return a copy with every editable field replaced by ``draft``."""
        return replace(
            self,
            title=draft.title,
            date=draft.date,
            start_time=draft.start_time,
            end_time=draft.end_time,
            location=draft.location,
            required_items=draft.required_items,
        )


@dataclass
class Session:
    """Identity persisted after a successful login."""

    token: str
    username: str
    userrole: str = ""
    userfamily: str = ""
