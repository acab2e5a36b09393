import threading

import pytest

from tripmap.api.geocoding import LocationProvider
from tripmap.api.models import ItineraryItem, LocationCandidate, VisitedPlace
from tripmap.api.records import InMemoryTripStore


class FakeProvider(LocationProvider):
    """Remote provider returning canned candidates, or raising."""

    def __init__(self, results=None, error=None):
        self.results = list(results or [])
        self.error = error
        self.calls = []
        self._lock = threading.Lock()

    def search_locations(self, term):
        with self._lock:
            self.calls.append(term)
        if self.error is not None:
            raise self.error
        return list(self.results)


def remote_candidate(n, name=None):
    return LocationCandidate(
        id=f"place-{n}",
        name=name or f"Remote Place {n}",
        address=f"{n} Remote Street",
        latitude=10.0 + n / 100,
        longitude=20.0 + n / 100,
    )


@pytest.fixture
def map_config():
    return {
        "default_lat": 37.7749,
        "default_lng": -122.4194,
        "default_zoom": 5,
        "single_marker_zoom": 15,
        "multi_marker_zoom": 12,
        "focus_zoom": 16,
        "selection_zoom": 17,
        "min_zoom": 1,
        "max_zoom": 21,
    }


@pytest.fixture
def search_config():
    return {
        "min_term_length": 2,
        "result_limit": 8,
        "remote_timeout_seconds": 2,
        "remote_workers": 4,
        "fallback_lat": 1.3521,
        "fallback_lng": 103.8198,
        "fallback_address": "Singapore",
    }


@pytest.fixture
def loader_config():
    return {
        "fetch_attempts": 2,
        "fetch_backoff_seconds": 0,
        "fetch_backoff_max_seconds": 0,
    }


@pytest.fixture
def session_config():
    return {"session_timeout_seconds": 1800, "max_sessions": 3}


@pytest.fixture
def store():
    store = InMemoryTripStore()
    store.register_trip("trip-1")
    store.add_item("trip-1", ItineraryItem(
        id="i1", name="Breakfast", category="Restaurant",
        planned_at=None, latitude=47.4979, longitude=19.0402,
    ))
    store.add_item("trip-1", ItineraryItem.from_record({
        "id": "i2", "name": "Castle tour", "category": "Sightseeing",
        "planned_at": "2025-03-02T09:00", "duration_hours": 2,
        "latitude": 47.4962, "longitude": 19.0396,
    }))
    store.add_item("trip-1", ItineraryItem.from_record({
        "id": "i3", "name": "Packing", "planned_at": "2025-03-03T18:30",
    }))
    store.add_place("trip-1", VisitedPlace(
        id="v1", name="Parliament", visit_date="2025-03-01",
        latitude=47.5070, longitude=19.0456,
    ))
    store.register_trip("empty-trip")
    return store
