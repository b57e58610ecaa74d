"""Single-marker map for an event's location."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import quote

from auth.validation import sanitize_input
from backend.schemas import EventRecord
from maps.geocoder import Coordinates, LocationResolver, Resolution, ResolutionState

logger = logging.getLogger(__name__)

DEFAULT_ZOOM = 15
TILE_URL = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
TILE_ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
)


@dataclass
class Marker:
    lat: float
    lon: float
    popup_html: str


@dataclass
class MapInstance:
    center: Coordinates
    zoom: int
    marker: Marker
    tile_url: str = TILE_URL
    attribution: str = TILE_ATTRIBUTION

    def to_dict(self) -> Dict:
        return {
            "center": {"lat": self.center.lat, "lon": self.center.lon},
            "display_name": self.center.display_name,
            "zoom": self.zoom,
            "marker": {
                "lat": self.marker.lat,
                "lon": self.marker.lon,
                "popup_html": self.marker.popup_html,
            },
            "tile_url": self.tile_url,
            "attribution": self.attribution,
        }


def external_map_links(location: str) -> Dict[str, str]:
    query = quote(location or "", safe="")
    return {
        "google": f"https://www.google.com/maps/search/?api=1&query={query}",
        "apple": f"https://maps.apple.com/?q={query}",
    }


class MapView:
    """Map panel for one event; at most one map instance exists at a time."""

    def __init__(self, event: EventRecord, resolver: Optional[LocationResolver] = None):
        self.event = event
        self.resolver = resolver or LocationResolver()
        self.map: Optional[MapInstance] = None
        self.is_open = False

    def open(self) -> Resolution:
        self.teardown()
        self.is_open = True
        resolution = self.resolver.resolve(self.event.location)
        if resolution.stale or not self.is_open:
            return resolution
        if resolution.state == ResolutionState.RESOLVED and resolution.coordinates:
            self.render(resolution.coordinates)
        return resolution

    def render(self, coordinates: Coordinates) -> MapInstance:
        self.teardown()
        popup = (
            f"<strong>{sanitize_input(self.event.title)}</strong><br>"
            f"{sanitize_input(self.event.location)}"
        )
        self.map = MapInstance(
            center=coordinates,
            zoom=DEFAULT_ZOOM,
            marker=Marker(coordinates.lat, coordinates.lon, popup),
        )
        logger.info("Rendered map for %s at %s,%s", self.event.id, coordinates.lat, coordinates.lon)
        return self.map

    def teardown(self) -> None:
        self.map = None

    def close(self) -> None:
        self.is_open = False
        self.resolver.close()
        self.teardown()

    def external_links(self) -> Dict[str, str]:
        return external_map_links(self.event.location)
