import pytest

from tripmap.api.errors import FetchFailure
from tripmap.api.models import Coordinate
from tripmap.api.notifications import CollectingNotifier
from tripmap.api.services.marker_service import MarkerProjector
from tripmap.api.services.trip_map_service import TripMapService, model_to_dict


@pytest.fixture
def notifier():
    return CollectingNotifier()


@pytest.fixture
def service(store, notifier, map_config, loader_config):
    return TripMapService(store, notifier=notifier, config=map_config, loader_config=loader_config)


class FlakyPlaces:
    """Wraps a store; visited places fail a fixed number of times."""

    def __init__(self, store, failures, error=None):
        self.store = store
        self.failures = failures
        self.error = error or FetchFailure("Service unavailable")
        self.place_calls = 0

    def get_itinerary_items(self, trip_id):
        return self.store.get_itinerary_items(trip_id)

    def get_visited_places(self, trip_id):
        self.place_calls += 1
        if self.place_calls <= self.failures:
            raise self.error
        return self.store.get_visited_places(trip_id)


def test_load_builds_markers_and_schedule(service, notifier):
    model = service.load("trip-1")

    assert model.error is None
    assert [m.value for m in model.markers] == ["itinerary-i1", "itinerary-i2", "visited-v1"]
    assert model.view.center == Coordinate(47.4979, 19.0402)
    assert model.view.zoom == 12
    # Scales follow the view zoom
    assert all(m.icon.scale == pytest.approx(m.icon.base_scale * 0.8) for m in model.markers)
    assert [d.label for d in model.schedule.days] == ["Day 1 - Sunday, Mar 2", "Day 2 - Monday, Mar 3"]
    assert [i.id for i in model.schedule.unscheduled] == ["i1"]
    assert notifier.drain() == []


def test_load_empty_trip_uses_default_view(service):
    model = service.load("empty-trip")
    assert model.error is None
    assert not model.has_data
    assert model.view.is_default
    assert model.schedule.is_empty


def test_failed_fetch_yields_error_model(store, notifier, map_config, loader_config):
    records = FlakyPlaces(store, failures=5)
    service = TripMapService(records, notifier=notifier, config=map_config, loader_config=loader_config)

    model = service.load("trip-1")

    assert model.error == "Service unavailable"
    assert model.markers == ()
    assert model.schedule.is_empty
    assert model.view.is_default
    assert records.place_calls == loader_config["fetch_attempts"]
    notification = notifier.drain()[0]
    assert notification.title == "Error Loading Data"
    assert notification.severity == "error"


def test_transient_fetch_failure_is_retried(store, notifier, map_config, loader_config):
    records = FlakyPlaces(store, failures=1)
    service = TripMapService(records, notifier=notifier, config=map_config, loader_config=loader_config)

    model = service.load("trip-1")

    assert model.error is None
    assert len(model.markers) == 3
    assert records.place_calls == 2


def test_unexpected_fetch_error_is_reported(store, notifier, map_config, loader_config):
    records = FlakyPlaces(store, failures=5, error=RuntimeError())
    service = TripMapService(records, notifier=notifier, config=map_config, loader_config=loader_config)

    model = service.load("trip-1")

    assert model.error == "An unknown error occurred."


def test_unknown_trip_fails_to_load(service):
    assert service.load("nope").error == "Trip nope not found"


def test_zoom_is_clamped_and_rescales(service):
    model = service.load("trip-1")

    zoomed = service.set_zoom(model, 40)
    assert zoomed.view.zoom == 21
    assert zoomed.markers[0].icon.scale == pytest.approx(1.44)
    assert model.view.zoom == 12

    assert service.set_zoom(model, -3).view.zoom == 1
    assert service.zoom_in(model).view.zoom == 13
    assert service.zoom_out(model).view.zoom == 11


def test_focus_item(service):
    model = service.load("trip-1")

    focused = service.focus_item(model, "i2")
    assert focused.view.center == Coordinate(47.4962, 19.0396)
    assert focused.view.zoom == 16
    assert focused.selected_marker == "itinerary-i2"

    # i3 has no location
    assert service.focus_item(model, "i3") is model
    assert service.focus_item(model, "missing") is model


def test_select_marker(service):
    model = service.load("trip-1")
    selected = service.select_marker(model, "visited-v1")
    assert selected.selected_marker == "visited-v1"
    assert selected.view.center == Coordinate(47.5070, 19.0456)
    assert service.select_marker(model, "visited-nope") is model


def test_temp_marker_replaces_previous_one(service):
    model = service.load("trip-1")
    first = MarkerProjector.temp_marker(Coordinate(1, 2), "First", 17)
    second = MarkerProjector.temp_marker(Coordinate(3, 4), "Second", 17)

    shown = service.with_temp_marker(service.with_temp_marker(model, first), second)

    temps = [m for m in shown.all_markers if m.value == "temp-marker"]
    assert [m.title for m in temps] == ["Second"]
    assert shown.view.center == Coordinate(3, 4)
    assert shown.view.zoom == 17

    cleared = service.without_temp_marker(shown)
    assert cleared.temp_marker is None
    assert len(cleared.all_markers) == 3


def test_model_to_dict(service):
    data = model_to_dict(service.load("trip-1"))
    assert data["has_data"]
    assert data["markers"][0]["mapIcon"]["baseScale"] == 1.2
    assert data["schedule"]["unscheduled"][0]["id"] == "i1"
    assert data["error"] is None
