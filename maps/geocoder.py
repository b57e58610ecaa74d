"""
Free-text location lookup against a Nominatim-compatible search API.

``LocationResolver`` tracks one map view's lookup. Starting a new lookup or
closing the view cancels the previous request's token, and a result whose
token was cancelled is thrown away instead of being applied.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import requests

import settings
from backend.errors import NetworkError, NotFoundError

logger = logging.getLogger(__name__)

FAILED_MESSAGE = "Failed to load map. Please try again."


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lon: float
    display_name: str = ""


class CancelToken:
    """Flag shared between a lookup and whoever may abandon it."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def geocode(location_text: str, timeout: Optional[float] = None) -> Coordinates:
    """Return the best match for ``location_text``.

    Raises ``NotFoundError`` when the service has no match and
    ``NetworkError`` when the lookup itself fails.
    """
    params = {"format": "json", "q": location_text, "limit": 1}
    headers = {"User-Agent": settings.GEOCODER_USER_AGENT}
    logger.info("GET %s q=%s", settings.GEOCODER_URL, location_text)
    try:
        response = requests.get(
            settings.GEOCODER_URL,
            params=params,
            headers=headers,
            timeout=timeout if timeout is not None else settings.REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        results = response.json()
    except (requests.RequestException, ValueError) as exc:
        logger.warning("Geocoding %r failed: %s", location_text, exc)
        raise NetworkError(FAILED_MESSAGE) from exc

    if not results:
        raise NotFoundError()
    best = results[0]
    try:
        return Coordinates(
            lat=float(best["lat"]),
            lon=float(best["lon"]),
            display_name=best.get("display_name", ""),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise NetworkError(FAILED_MESSAGE) from exc


class ResolutionState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass
class Resolution:
    state: ResolutionState
    coordinates: Optional[Coordinates] = None
    error: Optional[str] = None
    stale: bool = False


class LocationResolver:
    """Resolve one view's location, discarding results the view no longer wants."""

    def __init__(self, lookup=geocode):
        self.lookup = lookup
        self.state = ResolutionState.IDLE
        self.coordinates: Optional[Coordinates] = None
        self.error: Optional[str] = None
        self._token: Optional[CancelToken] = None
        self._lock = threading.Lock()

    def _begin(self) -> CancelToken:
        with self._lock:
            if self._token is not None:
                self._token.cancel()
            token = CancelToken()
            self._token = token
            self.state = ResolutionState.LOADING
            self.coordinates = None
            self.error = None
            return token

    def _apply(self, token: CancelToken, state: ResolutionState,
               coordinates: Optional[Coordinates] = None,
               error: Optional[str] = None) -> Resolution:
        with self._lock:
            if token.cancelled or token is not self._token:
                logger.info("Discarding stale geocoding result")
                return Resolution(state, coordinates, error, stale=True)
            self.state = state
            self.coordinates = coordinates
            self.error = error
            self._token = None
            return Resolution(state, coordinates, error)

    def resolve(self, location_text: Optional[str]) -> Resolution:
        if not location_text or not location_text.strip():
            return Resolution(self.state, self.coordinates, self.error)

        token = self._begin()
        try:
            coordinates = self.lookup(location_text.strip())
        except NotFoundError as exc:
            return self._apply(token, ResolutionState.NOT_FOUND, error=exc.user_message)
        except NetworkError as exc:
            return self._apply(token, ResolutionState.FAILED, error=exc.user_message)
        return self._apply(token, ResolutionState.RESOLVED, coordinates=coordinates)

    def cancel(self) -> None:
        with self._lock:
            if self._token is not None:
                self._token.cancel()
                self._token = None

    def close(self) -> None:
        """Abandon any in-flight lookup and return to ``IDLE``."""
        self.cancel()
        with self._lock:
            self.state = ResolutionState.IDLE
            self.coordinates = None
            self.error = None
