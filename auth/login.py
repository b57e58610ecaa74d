"""Login with a client-side cooldown, and new-account registration."""
from __future__ import annotations

import logging
import secrets
import string
import time
from dataclasses import dataclass
from typing import Callable, Optional

import settings
from auth.session import SessionManager
from auth.validation import (
    ensure_valid,
    validate_family_id,
    validate_password,
    validate_username,
)
from backend.api_client import BackendClient
from backend.errors import LoginLockedError, OrganiserError
from backend.schemas import Session

logger = logging.getLogger(__name__)

_FAMILY_ID_ALPHABET = string.digits + string.ascii_lowercase


class LoginController:
    """Log a user in and persist the session.

    After ``max_attempts`` consecutive failures further attempts are refused
    locally for ``lockout_seconds``, independent of any backend throttling.
    """

    def __init__(
        self,
        client: BackendClient,
        sessions: SessionManager,
        max_attempts: Optional[int] = None,
        lockout_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.sessions = sessions
        self.max_attempts = max_attempts or settings.LOGIN_MAX_ATTEMPTS
        self.lockout_seconds = (
            lockout_seconds if lockout_seconds is not None else settings.LOGIN_LOCKOUT_SECONDS
        )
        self.clock = clock
        self.failed_attempts = 0
        self._locked_until: Optional[float] = None

    def lockout_remaining(self) -> float:
        """Seconds left on the cooldown, ``0`` when not locked."""
        if self._locked_until is None:
            return 0.0
        remaining = self._locked_until - self.clock()
        if remaining <= 0:
            self._locked_until = None
            return 0.0
        return remaining

    @property
    def is_locked(self) -> bool:
        return self.lockout_remaining() > 0

    def login(self, username: str, password: str, family_id: str) -> Session:
        remaining = self.lockout_remaining()
        if remaining > 0:
            raise LoginLockedError(remaining)

        try:
            session = self.client.login(username, password, family_id)
        except OrganiserError:
            self._record_failure(username)
            raise

        self.failed_attempts = 0
        self.sessions.save(session)
        logger.info("Login successful for %s", session.username)
        return session

    def _record_failure(self, username: str) -> None:
        self.failed_attempts += 1
        logger.info("Login failed for %s (%d/%d)", username, self.failed_attempts, self.max_attempts)
        if self.failed_attempts >= self.max_attempts:
            self._locked_until = self.clock() + self.lockout_seconds
            self.failed_attempts = 0
            logger.warning("Login locked for %.0f seconds", self.lockout_seconds)

    def logout(self) -> None:
        self.sessions.clear()


@dataclass
class RegistrationResult:
    username: str
    family_id: str
    new_family: bool

    @property
    def message(self) -> str:
        if self.new_family:
            return (
                f"Registration successful! Your Family ID is: {self.family_id} - "
                "Share this with family members!"
            )
        return "Registration successful!"


def generate_family_id() -> str:
    """Return a fresh ``family_xxxxxxxx`` identifier."""
    suffix = "".join(secrets.choice(_FAMILY_ID_ALPHABET) for _ in range(8))
    return f"family_{suffix}"


class RegistrationController:
    def __init__(self, client: BackendClient):
        self.client = client

    def register(
        self, username: str, password: str, family_id: Optional[str] = None
    ) -> RegistrationResult:
        """Create an account, joining ``family_id`` or starting a new family.

        Raises ``ValidationError`` before any request when a field is invalid.
        """
        new_family = not family_id
        family_id = family_id.strip() if family_id else generate_family_id()
        ensure_valid(
            validate_username(username),
            validate_password(password),
            validate_family_id(family_id),
        )
        self.client.register(username, password, family_id)
        logger.info("Registered %s in %s", username, family_id)
        return RegistrationResult(username=username, family_id=family_id, new_family=new_family)
