import pytest
from flask import Flask

from conftest import FakeProvider, remote_candidate
from tripmap.api.services.session_manager import MapSessionManager
from tripmap.routes import create_travel_blueprint


@pytest.fixture
def manager(store, session_config, map_config, search_config, loader_config):
    return MapSessionManager(
        store,
        provider=FakeProvider([remote_candidate(1, name="Thermal Bath")]),
        config=session_config,
        map_config=map_config,
        search_config=search_config,
        loader_config=loader_config,
    )


@pytest.fixture
def client(manager):
    app = Flask(__name__)
    app.secret_key = "test-secret"
    app.register_blueprint(create_travel_blueprint(manager))
    with app.test_client() as client:
        yield client


def test_health(client):
    response = client.get("/travel/health")
    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


def test_config_without_api_key(client, monkeypatch):
    monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "")
    response = client.get("/travel/api/config")
    assert response.status_code == 500


def test_config_with_api_key(client, monkeypatch):
    monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "abc123")
    data = client.get("/travel/api/config").get_json()
    assert data["google_maps_api_key"] == "abc123"


def test_map(client):
    data = client.get("/travel/api/trips/trip-1/map").get_json()
    assert data["map"]["has_data"]
    assert len(data["map"]["markers"]) == 3
    assert data["map"]["schedule"]["days"][0]["label"] == "Day 1 - Sunday, Mar 2"
    assert data["notifications"] == []


def test_map_of_unknown_trip_reports_error(client):
    data = client.get("/travel/api/trips/nope/map").get_json()
    assert data["map"]["error"] == "Trip nope not found"
    assert data["notifications"][0]["title"] == "Error Loading Data"


def test_zoom(client):
    client.get("/travel/api/trips/trip-1/map")
    data = client.post("/travel/api/trips/trip-1/map/zoom", json={"direction": "in"}).get_json()
    assert data["map"]["view"]["zoom"] == 13

    data = client.post("/travel/api/trips/trip-1/map/zoom", json={"level": 99}).get_json()
    assert data["map"]["view"]["zoom"] == 21

    assert client.post("/travel/api/trips/trip-1/map/zoom", json={"level": "x"}).status_code == 400
    assert client.post("/travel/api/trips/trip-1/map/zoom", json={}).status_code == 400


def test_focus(client):
    client.get("/travel/api/trips/trip-1/map")
    data = client.post("/travel/api/trips/trip-1/map/focus", json={"item_id": "i2"}).get_json()
    assert data["map"]["selected_marker"] == "itinerary-i2"
    assert data["map"]["view"]["zoom"] == 16
    assert client.post("/travel/api/trips/trip-1/map/focus", json={}).status_code == 400


def test_add_item_flow(client):
    client.get("/travel/api/trips/trip-1/map")
    client.post("/travel/api/trips/trip-1/items/new")

    data = client.post("/travel/api/trips/trip-1/items/search", json={"term": "b"}).get_json()
    assert data["search"]["too_short"]
    assert data["notifications"][0]["severity"] == "info"

    data = client.post("/travel/api/trips/trip-1/items/search", json={"term": "bath"}).get_json()
    assert [r["id"] for r in data["search"]["results"]] == ["place-1"]

    data = client.post("/travel/api/trips/trip-1/items/select", json={"candidate_id": "place-1"}).get_json()
    assert data["session"]["state"] == "candidate_selected"
    assert data["map"]["markers"][-1]["value"] == "temp-marker"

    response = client.patch("/travel/api/trips/trip-1/items/draft",
                            json={"notes": "Bring towel", "duration": "2"})
    assert response.status_code == 200

    response = client.post("/travel/api/trips/trip-1/items")
    assert response.status_code == 201
    data = response.get_json()
    values = [m["value"] for m in data["map"]["markers"]]
    assert f"itinerary-{data['item_id']}" in values
    assert "temp-marker" not in values
    assert data["session"]["state"] == "empty"
    assert data["notifications"][-1]["message"] == "Itinerary item added successfully!"


def test_commit_without_location_is_rejected(client):
    client.post("/travel/api/trips/trip-1/items/new")
    client.patch("/travel/api/trips/trip-1/items/draft", json={"name": "Spa"})

    response = client.post("/travel/api/trips/trip-1/items")

    assert response.status_code == 400
    data = response.get_json()
    assert "location" in data["fields"]
    assert len(data["notifications"]) == 2


def test_unknown_draft_field_is_rejected(client):
    response = client.patch("/travel/api/trips/trip-1/items/draft", json={"colour": "red"})
    assert response.status_code == 400


def test_select_unknown_candidate(client):
    response = client.post("/travel/api/trips/trip-1/items/select", json={"candidate_id": "nope"})
    assert response.status_code == 404


def test_clear_selection(client):
    client.post("/travel/api/trips/trip-1/items/search", json={"term": "bath"})
    client.post("/travel/api/trips/trip-1/items/select", json={"candidate_id": "place-1"})
    data = client.delete("/travel/api/trips/trip-1/items/select").get_json()
    assert data["session"]["state"] == "empty"
    assert all(m["value"] != "temp-marker" for m in data["map"]["markers"])


def test_switching_trips_replaces_session(client, manager):
    client.get("/travel/api/trips/trip-1/map")
    client.get("/travel/api/trips/empty-trip/map")
    stats = manager.get_stats()
    assert stats["total_sessions"] == 1
    assert stats["trips"] == 1


def test_schedule_summary(client):
    data = client.get("/travel/api/trips/trip-1/schedule/summary?day=1").get_json()
    assert data["summary"] == "Day 1 - Sunday, Mar 2: Stop 1: Castle tour at 9:00 AM for 2 hr(s)."

    data = client.get("/travel/api/trips/trip-1/schedule/summary").get_json()
    assert data["summary"].startswith("Here's your 2-day schedule: ")


@pytest.mark.parametrize("method, path, body", [
    ("patch", "items/draft", ["name"]),
    ("post", "items/search", "budapest"),
    ("post", "items/select", [1, 2]),
    ("post", "map/zoom", ["in"]),
    ("post", "map/focus", 42),
])
def test_non_object_body_is_rejected(client, method, path, body):
    response = getattr(client, method)(f"/travel/api/trips/trip-1/{path}", json=body)
    assert response.status_code == 400
    assert response.get_json()["error"] == "Request body must be a JSON object"


def test_non_string_search_term_is_rejected(client):
    response = client.post("/travel/api/trips/trip-1/items/search", json={"term": 42})
    assert response.status_code == 400


def test_non_finite_zoom_level_is_rejected(client):
    response = client.post(
        "/travel/api/trips/trip-1/map/zoom",
        data='{"level": 1e999}',
        content_type="application/json",
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "Zoom level must be an integer"
