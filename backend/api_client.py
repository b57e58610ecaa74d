"""Client for the family events REST backend."""
from __future__ import annotations

import logging
from typing import Any, Optional

import requests

import settings
from backend.errors import (
    AuthorizationError,
    InvalidCredentialsError,
    NetworkError,
    ValidationError,
)
from backend.schemas import EventDraft, EventRecord, Session

logger = logging.getLogger(__name__)

_MASKED_FIELDS = {"password"}


def _log_request(method: str, url: str, payload: Any | None = None) -> None:
    """Log details about an outgoing HTTP request."""
    logger.info("%s %s", method.upper(), url)
    if payload is not None:
        if isinstance(payload, dict):
            payload = {k: ("***" if k in _MASKED_FIELDS else v) for k, v in payload.items()}
        logger.info("Payload: %s", payload)


class BackendClient:
    """Thin wrapper over the login, register and event endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.BACKEND_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT

    def _headers(self, session: Optional[Session] = None) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if session and session.token:
            token = session.token
            if not token.startswith("Bearer "):
                token = f"Bearer {token}"
            headers["Authorization"] = token
        return headers

    def _post(self, path: str, payload: dict[str, Any], session: Optional[Session] = None) -> requests.Response:
        url = f"{self.base_url}{path}"
        _log_request("post", url, payload)
        try:
            return requests.post(
                url, json=payload, headers=self._headers(session), timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            raise NetworkError() from exc

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError() from exc

    def login(self, username: str, password: str, family_id: str) -> Session:
        """Authenticate and return the session the backend issued."""
        response = self._post(
            "/login",
            {"username": username, "password": password, "familyId": family_id},
        )
        if response.status_code in (400, 401, 403, 404):
            raise InvalidCredentialsError()
        if response.status_code >= 400:
            raise NetworkError("Login failed. Please try again.")
        data = self._json(response)
        if not isinstance(data, dict) or not data.get("success") or not data.get("token"):
            raise InvalidCredentialsError()
        return Session(
            token=data["token"],
            username=data.get("username") or username,
            userrole=data.get("userrole") or "",
            userfamily=data.get("userfamily") or family_id,
        )

    def register(self, username: str, password: str, family_id: str) -> None:
        response = self._post(
            "/register",
            {"username": username, "password": password, "familyId": family_id},
        )
        data = self._json(response) if response.content else {}
        if response.status_code >= 400 or not (isinstance(data, dict) and data.get("success")):
            message = data.get("msg") if isinstance(data, dict) else None
            raise NetworkError(message or "Registration failed. Please try again.")

    def get_family_events(self, family_id: str, session: Optional[Session] = None) -> list[EventRecord]:
        """Return every event belonging to ``family_id``."""
        response = self._post("/get-family-events", {"familyId": family_id}, session)
        if response.status_code >= 400:
            raise NetworkError("Failed to load events. Please try again.")
        data = self._json(response)
        if not isinstance(data, list):
            raise NetworkError("Failed to load events. Please try again.")
        events = []
        for item in data:
            if not isinstance(item, dict):
                logger.warning("Skipping malformed event record: %r", item)
                continue
            try:
                events.append(EventRecord.from_api(item))
            except ValidationError as exc:
                logger.warning("Skipping event %s: %s", item.get("_id") or item.get("id"), exc)
        logger.info("Fetched %d event(s) for family %s", len(events), family_id)
        return events

    def create_event(self, draft: EventDraft, session: Session) -> dict[str, Any]:
        payload = {
            **draft.to_api(),
            "username": session.username,
            "userrole": session.userrole,
            "userfamily": session.userfamily,
        }
        response = self._post("/new-event-entry", payload, session)
        data = self._json(response) if response.content else {}
        if response.status_code >= 400 or not (isinstance(data, dict) and data.get("success")):
            raise NetworkError("Failed to create event. Please try again.")
        return data

    def update_event(self, event_id: str, draft: EventDraft, session: Session) -> dict[str, Any]:
        """Replace every editable field of an event."""
        payload = {
            **draft.to_api(),
            "username": session.username,
            "userfamily": session.userfamily,
        }
        response = self._post(f"/update-event/{event_id}", payload, session)
        if response.status_code >= 400:
            raise AuthorizationError()
        data = self._json(response) if response.content else {}
        if not (isinstance(data, dict) and data.get("success")):
            raise AuthorizationError()
        return data

    def delete_event(self, event_id: str, session: Session) -> None:
        response = self._post(
            f"/delete-event/{event_id}",
            {"username": session.username, "userfamily": session.userfamily},
            session,
        )
        message = "Failed to delete event. You can only delete events you created."
        if response.status_code >= 400:
            raise AuthorizationError(message)
        data = self._json(response) if response.content else {}
        if not (isinstance(data, dict) and data.get("event deleted")):
            raise AuthorizationError(message)
