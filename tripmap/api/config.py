# api/config.py
"""Configuration management for the trip map engine."""
import os
from dotenv import load_dotenv

load_dotenv()


def get_google_maps_config():
    """Get Google Maps configuration."""
    return {
        "api_key": os.getenv("GOOGLE_MAPS_API_KEY", ""),
        "client_id": os.getenv("maps_client_id", ""),
        "client_secret": os.getenv("maps_client_secret", ""),
        "timeout": float(os.getenv("GOOGLE_MAPS_TIMEOUT", "5")),
    }


def get_port():
    """Get port configuration."""
    return int(os.getenv("PORT", 3000))


def get_trip_data_file():
    """Path to a JSON file used to seed the in-memory trip store."""
    return os.getenv("TRIP_DATA_FILE", "")


def get_map_config():
    """Get map view defaults."""
    return {
        # Used when nothing on the trip has a usable coordinate
        "default_lat": float(os.getenv("MAP_DEFAULT_LAT", "37.7749")),
        "default_lng": float(os.getenv("MAP_DEFAULT_LNG", "-122.4194")),
        "default_zoom": int(os.getenv("MAP_DEFAULT_ZOOM", "5")),

        "single_marker_zoom": int(os.getenv("MAP_SINGLE_MARKER_ZOOM", "15")),
        "multi_marker_zoom": int(os.getenv("MAP_MULTI_MARKER_ZOOM", "12")),
        "focus_zoom": int(os.getenv("MAP_FOCUS_ZOOM", "16")),
        "selection_zoom": int(os.getenv("MAP_SELECTION_ZOOM", "17")),

        "min_zoom": int(os.getenv("MAP_MIN_ZOOM", "1")),
        "max_zoom": int(os.getenv("MAP_MAX_ZOOM", "21")),
    }


def get_search_config():
    """Get location search configuration."""
    return {
        "min_term_length": int(os.getenv("SEARCH_MIN_TERM_LENGTH", "2")),
        "result_limit": int(os.getenv("SEARCH_RESULT_LIMIT", "8")),
        "remote_timeout_seconds": float(os.getenv("SEARCH_REMOTE_TIMEOUT_SECONDS", "5")),
        "remote_workers": int(os.getenv("SEARCH_REMOTE_WORKERS", "4")),

        # Synthetic candidate returned when nothing else matched
        "fallback_lat": float(os.getenv("SEARCH_FALLBACK_LAT", "1.3521")),
        "fallback_lng": float(os.getenv("SEARCH_FALLBACK_LNG", "103.8198")),
        "fallback_address": os.getenv("SEARCH_FALLBACK_ADDRESS", "Singapore"),
    }


def get_loader_config():
    """Get trip record loading configuration."""
    return {
        "fetch_attempts": int(os.getenv("TRIP_FETCH_ATTEMPTS", "2")),
        "fetch_backoff_seconds": float(os.getenv("TRIP_FETCH_BACKOFF_SECONDS", "0.5")),
        "fetch_backoff_max_seconds": float(os.getenv("TRIP_FETCH_BACKOFF_MAX_SECONDS", "4")),
    }


def get_session_config():
    """Get map session configuration."""
    return {
        "session_timeout_seconds": int(os.getenv("MAP_SESSION_TIMEOUT_SECONDS", "1800")),
        "max_sessions": int(os.getenv("MAX_MAP_SESSIONS", "500")),
    }


def validate_search_config(config):
    """Validate search configuration values."""
    if config["min_term_length"] < 1:
        raise ValueError("SEARCH_MIN_TERM_LENGTH must be at least 1")
    if config["result_limit"] < 1:
        raise ValueError("SEARCH_RESULT_LIMIT must be at least 1")
    if config["remote_timeout_seconds"] <= 0:
        raise ValueError("SEARCH_REMOTE_TIMEOUT_SECONDS must be positive")
    return True
