"""Shared data structures for the trip map.

Every record here is a frozen dataclass: projections and schedules are
rebuilt from the raw records instead of being edited in place.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from tripmap.api.formatting import parse_timestamp

logger = logging.getLogger(__name__)


class Category(str, Enum):
    ACCOMMODATION = "Accommodation"
    RESTAURANT = "Restaurant"
    EVENT_ACTIVITY = "Event/Activity"
    SIGHTSEEING = "Sightseeing"
    TRANSPORTATION = "Transportation"
    SHOPPING = "Shopping"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: Any) -> "Category":
        """Map a raw category value to a Category; unknown values become OTHER."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER

    @classmethod
    def is_known(cls, value: Any) -> bool:
        if isinstance(value, cls):
            return True
        return isinstance(value, str) and value in cls._value2member_map_


def _as_float(value: Any) -> Optional[float]:
    # bool is an int subclass; a True latitude is not a latitude
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


@dataclass(frozen=True)
class Coordinate:
    """A validated latitude / longitude pair."""

    lat: float
    lng: float

    @classmethod
    def parse(cls, lat: Any, lng: Any) -> Optional["Coordinate"]:
        """Return a Coordinate, or None if either value is missing or malformed."""
        lat_f = _as_float(lat)
        lng_f = _as_float(lng)
        if lat_f is None or lng_f is None:
            return None
        if not (-90 <= lat_f <= 90 and -180 <= lng_f <= 180):
            return None
        return cls(lat_f, lng_f)

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


def _parse_duration(value: Any) -> Optional[float]:
    hours = _as_float(value)
    if hours is None or hours < 0:
        return None
    return hours


@dataclass(frozen=True)
class ItineraryItem:
    """A planned activity on a trip."""

    id: str
    name: str = ""
    notes: str = ""
    category: Optional[str] = None
    planned_at: Optional[datetime] = None  # None means unscheduled
    duration_hours: Optional[float] = None
    latitude: Any = None
    longitude: Any = None

    @property
    def coordinate(self) -> Optional[Coordinate]:
        return Coordinate.parse(self.latitude, self.longitude)

    @property
    def is_scheduled(self) -> bool:
        return self.planned_at is not None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ItineraryItem":
        """Build an item from a raw record dict.

        A timestamp that cannot be parsed leaves the item unscheduled, and a
        negative or non-numeric duration is dropped.
        """
        raw_time = record.get("planned_at")
        planned_at = parse_timestamp(raw_time)
        if raw_time not in (None, "") and planned_at is None:
            logger.warning(
                f"Itinerary item {record.get('id')} has an invalid planned time {raw_time!r}; "
                "treating it as unscheduled"
            )

        return cls(
            id=str(record["id"]),
            name=record.get("name") or "",
            notes=record.get("notes") or "",
            category=record.get("category") or None,
            planned_at=planned_at,
            duration_hours=_parse_duration(record.get("duration_hours")),
            latitude=record.get("latitude"),
            longitude=record.get("longitude"),
        )

    def to_dict(self) -> dict:
        coordinate = self.coordinate
        return {
            "id": self.id,
            "name": self.name,
            "notes": self.notes,
            "category": Category.parse(self.category).value,
            "planned_at": self.planned_at.isoformat() if self.planned_at else None,
            "duration_hours": self.duration_hours,
            "location": coordinate.to_dict() if coordinate else None,
        }


@dataclass(frozen=True)
class VisitedPlace:
    """A place already visited on the trip; created elsewhere, read-only here."""

    id: str
    name: str = ""
    visit_date: Optional[str] = None
    latitude: Any = None
    longitude: Any = None

    @property
    def coordinate(self) -> Optional[Coordinate]:
        return Coordinate.parse(self.latitude, self.longitude)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "VisitedPlace":
        return cls(
            id=str(record["id"]),
            name=record.get("name") or "",
            visit_date=record.get("visit_date") or None,
            latitude=record.get("latitude"),
            longitude=record.get("longitude"),
        )

    def to_dict(self) -> dict:
        coordinate = self.coordinate
        return {
            "id": self.id,
            "name": self.name,
            "visit_date": self.visit_date,
            "location": coordinate.to_dict() if coordinate else None,
        }


@dataclass(frozen=True)
class MarkerIcon:
    """Vector symbol for a marker. ``base_scale`` never changes after creation."""

    path: str
    fill_color: str
    fill_opacity: float = 1.0
    stroke_color: str = "white"
    stroke_weight: float = 1.0
    scale: float = 1.0
    base_scale: float = 1.0

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "fillColor": self.fill_color,
            "fillOpacity": self.fill_opacity,
            "strokeColor": self.stroke_color,
            "strokeWeight": self.stroke_weight,
            "scale": self.scale,
            "baseScale": self.base_scale,
        }


@dataclass(frozen=True)
class MapMarker:
    value: str  # "itinerary-<id>", "visited-<id>" or "temp-marker"
    coordinate: Coordinate
    title: str
    description: str
    icon: MarkerIcon

    def to_dict(self) -> dict:
        return {
            "value": self.value,
            "location": self.coordinate.to_dict(),
            "title": self.title,
            "description": self.description,
            "mapIcon": self.icon.to_dict(),
        }


@dataclass(frozen=True)
class MapView:
    center: Coordinate
    zoom: int
    is_default: bool = False

    def to_dict(self) -> dict:
        return {
            "center": self.center.to_dict(),
            "zoom": self.zoom,
            "is_default": self.is_default,
        }


@dataclass(frozen=True)
class DayBucket:
    """Itinerary items sharing one calendar date."""

    date: date
    day_number: int
    label: str
    items: Tuple[ItineraryItem, ...] = ()


@dataclass(frozen=True)
class DaySchedule:
    days: Tuple[DayBucket, ...] = ()
    unscheduled: Tuple[ItineraryItem, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.days and not self.unscheduled


@dataclass(frozen=True)
class LocationCandidate:
    """One location search result."""

    id: str
    name: str
    address: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    source: str = "remote"  # "gazetteer" | "remote" | "fallback"

    @property
    def label(self) -> str:
        return self.address or self.name

    @property
    def coordinate(self) -> Optional[Coordinate]:
        return Coordinate.parse(self.latitude, self.longitude)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "label": self.label,
            "address": self.address,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "source": self.source,
        }


@dataclass
class ItemDraft:
    """Raw form values for a new itinerary item, exactly as typed."""

    name: str = ""
    notes: str = ""
    category: str = ""
    planned_at: Any = ""
    duration: Any = ""

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "notes": self.notes,
            "category": self.category,
            "planned_at": self.planned_at if not isinstance(self.planned_at, datetime)
            else self.planned_at.isoformat(),
            "duration": self.duration,
        }


@dataclass(frozen=True)
class TripMapModel:
    """Everything the map page shows for one trip.

    ``temp_marker`` is the single not-yet-saved location marker; it is kept
    apart from ``markers`` so there can never be two of them.
    """

    trip_id: str
    view: MapView
    markers: Tuple[MapMarker, ...] = ()
    schedule: DaySchedule = field(default_factory=DaySchedule)
    items: Tuple[ItineraryItem, ...] = ()
    temp_marker: Optional[MapMarker] = None
    selected_marker: Optional[str] = None
    error: Optional[str] = None

    @property
    def all_markers(self) -> Tuple[MapMarker, ...]:
        if self.temp_marker is None:
            return self.markers
        return self.markers + (self.temp_marker,)

    @property
    def has_data(self) -> bool:
        return bool(self.markers)
