# tripmap/routes/travel.py
"""Travel routes and blueprint configuration."""

import logging

from flask import Blueprint, jsonify, request, session

from tripmap.api.config import get_google_maps_config
from tripmap.api.errors import CommitFailure, ValidationFailure
from tripmap.api.services.schedule_service import ScheduleService
from tripmap.api.services.session_manager import MapSessionManager
from tripmap.api.services.trip_map_service import model_to_dict

logger = logging.getLogger(__name__)

SESSION_KEY = "map_session_id"


def create_travel_blueprint(manager: MapSessionManager):
    """Create and configure the travel blueprint.

    Args:
        manager: Session manager holding each browser's map and add-item state

    Returns:
        Configured Flask Blueprint
    """
    travel_bp = Blueprint("travel", __name__, url_prefix="/travel")

    def _map_session(trip_id, fresh=False):
        """Map session of this browser for ``trip_id``, created on first use."""
        session_id = session.get(SESSION_KEY)
        map_session = manager.get_session(session_id) if session_id else None

        if map_session is not None and map_session.trip_id != trip_id:
            manager.remove_session(map_session.session_id)
            map_session = None

        if map_session is None:
            map_session = manager.create_session(trip_id)
            if map_session is None:
                return None
            session[SESSION_KEY] = map_session.session_id
            session.modified = True
        elif fresh:
            map_session.reload()
        return map_session

    def _respond(map_session, payload, status=200):
        payload["notifications"] = [n.to_dict() for n in map_session.notifier.drain()]
        return jsonify(payload), status

    def _unavailable():
        return jsonify({"error": "Too many active map sessions, try again later"}), 503

    def _json_body():
        """Request body as a dict; None when it is not a JSON object."""
        data = request.get_json(silent=True)
        if data is None:
            return {}
        return data if isinstance(data, dict) else None

    def _bad_body():
        return jsonify({"error": "Request body must be a JSON object"}), 400

    @travel_bp.route("/api/config")
    def api_config():
        """Return Google Maps configuration for frontend."""
        config = get_google_maps_config()

        if config.get("api_key"):
            return jsonify({
                "auth_type": "api_key",
                "google_maps_api_key": config["api_key"],
                "google_maps_client_id": config.get("client_id", ""),
                "client_secret_configured": bool(config.get("client_secret"))
            })
        else:
            return jsonify({
                "error": "No Google Maps API key configured"
            }), 500

    @travel_bp.route("/api/trips/<trip_id>/map")
    def api_map(trip_id):
        """Load (or reload) the map and day schedule of a trip."""
        map_session = _map_session(trip_id, fresh=True)
        if map_session is None:
            return _unavailable()
        return _respond(map_session, {"map": model_to_dict(map_session.model)})

    @travel_bp.route("/api/trips/<trip_id>/map/zoom", methods=["POST"])
    def api_zoom(trip_id):
        """Zoom by one step ({"direction": "in"|"out"}) or to {"level": n}."""
        map_session = _map_session(trip_id)
        if map_session is None:
            return _unavailable()

        data = _json_body()
        if data is None:
            return _bad_body()
        service = map_session.service
        direction = data.get("direction")

        if direction == "in":
            map_session.model = service.zoom_in(map_session.model)
        elif direction == "out":
            map_session.model = service.zoom_out(map_session.model)
        elif "level" in data:
            try:
                level = int(data["level"])
            except (TypeError, ValueError, OverflowError):
                return jsonify({"error": "Zoom level must be an integer"}), 400
            map_session.model = service.set_zoom(map_session.model, level)
        else:
            return jsonify({"error": "Provide a direction ('in' or 'out') or a level"}), 400

        return _respond(map_session, {"map": model_to_dict(map_session.model)})

    @travel_bp.route("/api/trips/<trip_id>/map/focus", methods=["POST"])
    def api_focus(trip_id):
        """Center the map on an itinerary item or a marker."""
        map_session = _map_session(trip_id)
        if map_session is None:
            return _unavailable()

        data = _json_body()
        if data is None:
            return _bad_body()
        if data.get("item_id"):
            map_session.model = map_session.service.focus_item(map_session.model, str(data["item_id"]))
        elif data.get("marker"):
            map_session.model = map_session.service.select_marker(map_session.model, str(data["marker"]))
        else:
            return jsonify({"error": "Provide an item_id or a marker"}), 400

        return _respond(map_session, {"map": model_to_dict(map_session.model)})

    @travel_bp.route("/api/trips/<trip_id>/schedule/summary")
    def api_schedule_summary(trip_id):
        """Plain-text summary of one day (?day=n) or of the whole schedule."""
        map_session = _map_session(trip_id)
        if map_session is None:
            return _unavailable()

        day = request.args.get("day", 0, type=int)
        summary = ScheduleService.describe_day(map_session.model.schedule, day)
        return _respond(map_session, {"day": day, "summary": summary})

    @travel_bp.route("/api/trips/<trip_id>/items/new", methods=["POST", "DELETE"])
    def api_item_modal(trip_id):
        """Open (POST) or close (DELETE) the add-item workflow."""
        map_session = _map_session(trip_id)
        if map_session is None:
            return _unavailable()

        if request.method == "POST":
            map_session.edit.open()
        else:
            map_session.edit.close()
        map_session.model = map_session.service.without_temp_marker(map_session.model)

        return _respond(map_session, {
            "session": map_session.edit.to_dict(),
            "map": model_to_dict(map_session.model),
        })

    @travel_bp.route("/api/trips/<trip_id>/items/draft", methods=["PATCH"])
    def api_item_draft(trip_id):
        """Update draft fields of the item being added."""
        map_session = _map_session(trip_id)
        if map_session is None:
            return _unavailable()

        data = _json_body()
        if data is None:
            return _bad_body()
        try:
            map_session.edit.update_draft(**data)
        except ValueError as e:
            return jsonify({"error": str(e)}), 400

        return _respond(map_session, {"session": map_session.edit.to_dict()})

    @travel_bp.route("/api/trips/<trip_id>/items/search", methods=["POST"])
    def api_item_search(trip_id):
        """Search locations for the item being added."""
        map_session = _map_session(trip_id)
        if map_session is None:
            return _unavailable()

        data = _json_body()
        if data is None:
            return _bad_body()
        term = data.get("term") or ""
        if not isinstance(term, str):
            return jsonify({"error": "Search term must be a string"}), 400
        outcome = map_session.edit.search(term)
        return _respond(map_session, {
            "search": outcome.to_dict(),
            "session": map_session.edit.to_dict(),
        })

    @travel_bp.route("/api/trips/<trip_id>/items/select", methods=["POST", "DELETE"])
    def api_item_select(trip_id):
        """Pick (POST) or clear (DELETE) the location of the item being added."""
        map_session = _map_session(trip_id)
        if map_session is None:
            return _unavailable()

        edit = map_session.edit
        service = map_session.service

        if request.method == "DELETE":
            if not edit.clear_selection():
                return _respond(map_session, {
                    "error": "A save is already in progress",
                    "session": edit.to_dict(),
                }, 409)
            map_session.model = service.without_temp_marker(map_session.model)
        else:
            data = _json_body()
            if data is None:
                return _bad_body()
            candidate = edit.select_candidate(str(data.get("candidate_id", "")))
            if candidate is None:
                return jsonify({"error": "Unknown candidate"}), 404
            map_session.model = service.with_temp_marker(map_session.model, edit.temp_marker)

        return _respond(map_session, {
            "session": edit.to_dict(),
            "map": model_to_dict(map_session.model),
        })

    @travel_bp.route("/api/trips/<trip_id>/items", methods=["POST"])
    def api_item_commit(trip_id):
        """Save the item being added."""
        map_session = _map_session(trip_id)
        if map_session is None:
            return _unavailable()

        edit = map_session.edit
        try:
            item_id = edit.commit()
        except ValidationFailure as e:
            return _respond(map_session, {
                "error": "Validation failed",
                "fields": e.fields,
                "session": edit.to_dict(),
            }, 400)
        except CommitFailure as e:
            return _respond(map_session, {
                "error": str(e),
                "session": edit.to_dict(),
            }, 502)

        if item_id is None:
            return _respond(map_session, {
                "error": "A save is already in progress",
                "session": edit.to_dict(),
            }, 409)

        # The commit hook has already reloaded the trip
        return _respond(map_session, {
            "item_id": item_id,
            "session": edit.to_dict(),
            "map": model_to_dict(map_session.model),
        }, 201)

    @travel_bp.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "service": "travel", "sessions": manager.get_stats()})

    return travel_bp


# Export for backward compatibility
__all__ = ['create_travel_blueprint']
