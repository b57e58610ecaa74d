"""
Session storage and the login route guard.

Every read or write of the persisted session goes through ``SessionManager``.
The token is decoded locally only to read its ``exp`` claim; the signature is
never checked here because the backend verifies it on every real request.
"""
from __future__ import annotations

import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, Optional

import jwt

import settings
from backend.errors import AuthError
from backend.schemas import Session

logger = logging.getLogger(__name__)

SESSION_KEYS = ("token", "username", "userrole", "userfamily")


def _strip_bearer(token: str) -> str:
    return token[len("Bearer "):] if token.startswith("Bearer ") else token


def decode_token_payload(token: Optional[str]) -> Optional[Dict[str, Any]]:
    """Return the JWT payload, or ``None`` if the token cannot be decoded."""
    if not token:
        return None
    try:
        return jwt.decode(
            _strip_bearer(token),
            options={"verify_signature": False, "verify_exp": False},
        )
    except jwt.InvalidTokenError:
        return None


def is_token_expired(token: Optional[str], now: Optional[float] = None) -> bool:
    """Missing, malformed and past-``exp`` tokens all count as expired."""
    payload = decode_token_payload(token)
    if payload is None:
        return True
    exp = payload.get("exp")
    if exp is None:
        return False
    now = time.time() if now is None else now
    try:
        return float(exp) < now
    except (TypeError, ValueError):
        return True


def token_minutes_remaining(token: Optional[str], now: Optional[float] = None) -> int:
    payload = decode_token_payload(token)
    if not payload or payload.get("exp") is None:
        return 0
    now = time.time() if now is None else now
    try:
        return max(0, int((float(payload["exp"]) - now) // 60))
    except (TypeError, ValueError):
        return 0


class MemorySessionStore:
    """String key/value store kept in memory."""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class FileSessionStore(MemorySessionStore):
    """Key/value store persisted as a JSON object on disk."""

    def __init__(self, path: str | Path = settings.SESSION_FILE):
        self.path = Path(path)
        super().__init__(self._read())

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as err:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, err)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
        # Holds a bearer token; owner-only.
        os.chmod(self.path, 0o600)

    def set(self, key: str, value: str) -> None:
        super().set(key, value)
        self._write()

    def remove(self, key: str) -> None:
        super().remove(key)
        self._write()


class SessionManager:
    """The one place that reads and writes the persisted session."""

    def __init__(self, store: Optional[MemorySessionStore] = None):
        self.store = store if store is not None else MemorySessionStore()

    def save(self, session: Session) -> None:
        for key in SESSION_KEYS:
            self.store.set(key, getattr(session, key) or "")
        logger.info("Stored session for %s", session.username)

    def load(self) -> Optional[Session]:
        token = self.store.get("token")
        if not token:
            return None
        return Session(
            token=token,
            username=self.store.get("username") or "",
            userrole=self.store.get("userrole") or "",
            userfamily=self.store.get("userfamily") or "",
        )

    def clear(self) -> None:
        for key in SESSION_KEYS:
            self.store.remove(key)

    def require(self, now: Optional[float] = None) -> Session:
        """Return the current session or clear storage and raise ``AuthError``."""
        session = self.load()
        if session is None:
            raise AuthError("Please log in to continue.")
        if is_token_expired(session.token, now):
            logger.info("Session token for %s is expired or invalid", session.username)
            self.clear()
            raise AuthError()
        return session
