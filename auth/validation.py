"""Client-side checks for the login and registration forms."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List

from backend.errors import ValidationError

SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'
_SPECIAL_RE = re.compile(r'[!@#$%^&*(),.?":{}|<>]')
_USERNAME_RE = re.compile(r"[a-zA-Z0-9_]+")
_FAMILY_ID_RE = re.compile(r"[a-zA-Z0-9_-]+")

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "/": "&#x2F;",
}


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_password(password: str) -> ValidationResult:
    errors = []
    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        errors.append("Password must contain at least one number")
    if not _SPECIAL_RE.search(password):
        errors.append(
            f"Password must contain at least one special character ({SPECIAL_CHARACTERS})"
        )
    return ValidationResult(errors)


def validate_username(username: str) -> ValidationResult:
    errors = []
    if len(username) < 3:
        errors.append("Username must be at least 3 characters long")
    if len(username) > 20:
        errors.append("Username must be no more than 20 characters long")
    if not _USERNAME_RE.fullmatch(username):
        errors.append("Username can only contain letters, numbers, and underscores")
    return ValidationResult(errors)


def validate_family_id(family_id: str) -> ValidationResult:
    errors = []
    if len(family_id) < 5:
        errors.append("Family ID must be at least 5 characters long")
    if not _FAMILY_ID_RE.fullmatch(family_id):
        errors.append(
            "Family ID can only contain letters, numbers, underscores, and hyphens"
        )
    return ValidationResult(errors)


def ensure_valid(*results: ValidationResult) -> None:
    """Raise ``ValidationError`` carrying every message from ``results``."""
    errors = [message for result in results for message in result.errors]
    if errors:
        raise ValidationError(errors)


def sanitize_input(text):
    """Escape characters that could inject markup into rendered HTML."""
    if not isinstance(text, str):
        return text
    return "".join(_HTML_ESCAPES.get(ch, ch) for ch in text)
