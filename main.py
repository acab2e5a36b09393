"""
TripMap – main application entry point

* Flask app serving the trip map, day schedule and add-item workflow under
  the `/travel` prefix.
* Trip records are served from an in-memory store, optionally seeded from the
  JSON file named by TRIP_DATA_FILE.
* Location search uses Google Places when GOOGLE_MAPS_API_KEY is set and falls
  back to the built-in gazetteer otherwise.
"""

import os
import logging

from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv

# --------------------------------------------------------------------------- #
# Environment & logging
# --------------------------------------------------------------------------- #
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------- #
# Flask initialisation
# --------------------------------------------------------------------------- #
app = Flask(__name__)

flask_secret_key = os.getenv("FLASK_SECRET_KEY") or os.urandom(32).hex()
if "FLASK_SECRET_KEY" not in os.environ:
    logger.warning("No FLASK_SECRET_KEY found. Generated a temporary key.")
app.secret_key = flask_secret_key

app.config.update(
    SESSION_COOKIE_SECURE=False,
    SESSION_COOKIE_HTTPONLY=True,
    SESSION_COOKIE_SAMESITE="Lax",
    PERMANENT_SESSION_LIFETIME=86400,
)

# CORS for local dev / cross‑origin front‑end requests
CORS(app, origins="*", supports_credentials=True)

# --------------------------------------------------------------------------- #
# Records, search provider & blueprints
# --------------------------------------------------------------------------- #
from tripmap.api.config import get_port, get_search_config, get_trip_data_file, validate_search_config  # noqa: E402
from tripmap.api.geocoding import GooglePlacesProvider  # noqa: E402
from tripmap.api.records import InMemoryTripStore  # noqa: E402
from tripmap.api.services.session_manager import MapSessionManager  # noqa: E402
from tripmap.routes import create_travel_blueprint  # noqa: E402

search_config = get_search_config()
validate_search_config(search_config)

trip_data_file = get_trip_data_file()
if trip_data_file:
    store = InMemoryTripStore.from_file(trip_data_file)
    logger.info(f"Seeded trip store from {trip_data_file}")
else:
    store = InMemoryTripStore()
    logger.warning("No TRIP_DATA_FILE configured. Starting with an empty trip store.")

manager = MapSessionManager(store, provider=GooglePlacesProvider(), search_config=search_config)
app.register_blueprint(create_travel_blueprint(manager))

# --------------------------------------------------------------------------- #
# Diagnostic routes (optional)
# --------------------------------------------------------------------------- #
@app.route("/debug")
def debug():
    """Simple JSON health endpoint."""
    return {
        "status": "ok",
        "trip_data_file": trip_data_file or None,
        "endpoints": {
            "health": "/travel/health",
            "config": "/travel/api/config",
            "map": "/travel/api/trips/<trip_id>/map",
        },
    }

# --------------------------------------------------------------------------- #
# Local development runner ( `python main.py` )
# --------------------------------------------------------------------------- #
if __name__ == "__main__":
    port = get_port()
    logger.info("Starting travel app on http://localhost:%d", port)
    app.run(host="0.0.0.0", port=port, debug=False)
# --------------------------------------------------------------------------- #
# Export for mounting in router
# --------------------------------------------------------------------------- #
__all__ = ["app"]
