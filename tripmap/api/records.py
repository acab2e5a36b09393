# tripmap/api/records.py
"""Trip record collaborators: fetching itinerary data and creating items."""

from __future__ import annotations

import json
import logging
import threading
import uuid
from typing import Any, Dict, List

from tripmap.api.errors import FetchFailure
from tripmap.api.models import Category, ItineraryItem, VisitedPlace

logger = logging.getLogger(__name__)


class TripRecordSource:
    """Where itinerary items and visited places come from.

    Fetch methods raise FetchFailure when the records cannot be loaded.
    ``create_itinerary_item`` returns the new item's id and may raise
    anything; the edit session turns that into a CommitFailure.
    """

    def get_itinerary_items(self, trip_id: str) -> List[ItineraryItem]:
        raise NotImplementedError

    def get_visited_places(self, trip_id: str) -> List[VisitedPlace]:
        raise NotImplementedError

    def create_itinerary_item(self, draft: Dict[str, Any]) -> str:
        raise NotImplementedError


class InMemoryTripStore(TripRecordSource):
    """Thread-safe in-process store, seeded from code or a JSON file."""

    def __init__(self):
        self._items: Dict[str, List[ItineraryItem]] = {}
        self._places: Dict[str, List[VisitedPlace]] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_file(cls, path: str) -> "InMemoryTripStore":
        """Load a store from JSON shaped like
        ``{"trips": {"<trip id>": {"itinerary_items": [...], "visited_places": [...]}}}``.
        """
        with open(path, encoding="utf-8") as fh:
            payload = json.load(fh)
        return cls.from_dict(payload)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "InMemoryTripStore":
        store = cls()
        for trip_id, trip in (payload.get("trips") or {}).items():
            store.register_trip(trip_id)
            for record in trip.get("itinerary_items", []):
                store.add_item(trip_id, ItineraryItem.from_record(record))
            for record in trip.get("visited_places", []):
                store.add_place(trip_id, VisitedPlace.from_record(record))
        logger.info(f"Loaded {len(store._items)} trips into the in-memory store")
        return store

    def register_trip(self, trip_id: str) -> None:
        with self._lock:
            self._items.setdefault(trip_id, [])
            self._places.setdefault(trip_id, [])

    def add_item(self, trip_id: str, item: ItineraryItem) -> None:
        with self._lock:
            self._items.setdefault(trip_id, []).append(item)
            self._places.setdefault(trip_id, [])

    def add_place(self, trip_id: str, place: VisitedPlace) -> None:
        with self._lock:
            self._places.setdefault(trip_id, []).append(place)
            self._items.setdefault(trip_id, [])

    def get_itinerary_items(self, trip_id: str) -> List[ItineraryItem]:
        with self._lock:
            if trip_id not in self._items:
                raise FetchFailure(f"Trip {trip_id} not found")
            return list(self._items[trip_id])

    def get_visited_places(self, trip_id: str) -> List[VisitedPlace]:
        with self._lock:
            if trip_id not in self._places:
                raise FetchFailure(f"Trip {trip_id} not found")
            return list(self._places[trip_id])

    def create_itinerary_item(self, draft: Dict[str, Any]) -> str:
        trip_id = draft.get("trip_id")
        name = (draft.get("name") or "").strip()
        if not name:
            raise ValueError("Item name is required")

        item = ItineraryItem(
            id=uuid.uuid4().hex[:18],
            name=name,
            notes=draft.get("notes") or "",
            category=Category.parse(draft.get("category")).value,
            planned_at=draft.get("planned_at"),
            duration_hours=draft.get("duration_hours"),
            latitude=draft.get("latitude"),
            longitude=draft.get("longitude"),
        )

        with self._lock:
            if trip_id not in self._items:
                raise ValueError(f"Trip {trip_id} not found")
            self._items[trip_id].append(item)

        logger.info(f"Created itinerary item {item.id} ({item.name}) for trip {trip_id}")
        return item.id
