"""Error types shared by the client, auth and map modules."""
from __future__ import annotations

from typing import List, Optional


class OrganiserError(Exception):
    """Base class for every error the organiser surfaces to a user."""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None):
        self.user_message = message or self.default_message
        super().__init__(self.user_message)


class AuthError(OrganiserError):
    """No usable session; the user has to log in again."""

    default_message = "Your session has expired. Please log in again."


class InvalidCredentialsError(AuthError):
    default_message = "Login failed. Check your credentials."


class LoginLockedError(AuthError):
    """Raised locally while the login cooldown is active."""

    def __init__(self, retry_after: float):
        self.retry_after = max(0.0, retry_after)
        seconds = int(self.retry_after) + (1 if self.retry_after % 1 else 0)
        super().__init__(
            f"Too many failed login attempts. Try again in {seconds} seconds."
        )


class ValidationError(OrganiserError):
    """One or more form fields failed client-side checks."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid input.")


class NetworkError(OrganiserError):
    default_message = "Request failed. Please try again."


class AuthorizationError(NetworkError):
    """The backend refused an edit or delete.

    Not distinguished from other backend failures: the user sees the same
    generic message whatever the backend's reason was.
    """

    default_message = "Failed to update event. You can only modify events you created."


class NotFoundError(OrganiserError):
    default_message = "Location not found. Try a more specific address."
