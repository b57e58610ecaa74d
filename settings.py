"""Runtime configuration for the Family Organiser client."""
from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:3002").rstrip("/")
GEOCODER_URL = os.getenv("GEOCODER_URL", "https://nominatim.openstreetmap.org/search")
GEOCODER_USER_AGENT = os.getenv("GEOCODER_USER_AGENT", "FamilyOrganiser/1.0")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10"))

SESSION_FILE = Path(
    os.getenv("SESSION_FILE", str(Path.home() / ".family_organiser" / "session.json"))
).expanduser()

LOGIN_MAX_ATTEMPTS = int(os.getenv("LOGIN_MAX_ATTEMPTS", "5"))
LOGIN_LOCKOUT_SECONDS = float(os.getenv("LOGIN_LOCKOUT_SECONDS", "30"))


def configure_logging() -> None:
    """Enable INFO logging when ``ORGANISER_DEBUG`` is set."""
    if os.getenv("ORGANISER_DEBUG"):
        logging.basicConfig(level=logging.INFO, format="%(message)s")
