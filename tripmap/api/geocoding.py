# tripmap/api/geocoding.py
from __future__ import annotations

import logging
from typing import Any, List, Optional

import googlemaps
from googlemaps import exceptions as gm_exceptions

from tripmap.api.config import get_google_maps_config
from tripmap.api.errors import RemoteSearchFailure
from tripmap.api.models import Coordinate, LocationCandidate

logger = logging.getLogger(__name__)

_gmaps: googlemaps.Client | None = None

_GOOGLE_ERRORS = (
    gm_exceptions.ApiError,
    gm_exceptions.HTTPError,
    gm_exceptions.Timeout,
    gm_exceptions.TransportError,
)


def _get_client() -> googlemaps.Client | None:
    """Return a cached googlemaps.Client instance, or None if unconfigured."""
    global _gmaps
    if _gmaps is None:
        try:
            cfg = get_google_maps_config()
            api_key = cfg.get("api_key", "")
            if not api_key:
                logger.error("No Google Maps API key found in config")
                return None
            logger.info(f"Initializing Google Maps client with key: {api_key[:10]}...")
            _gmaps = googlemaps.Client(key=api_key, timeout=cfg.get("timeout"))
        except Exception as e:
            logger.error(f"Failed to initialize Google Maps client: {e}")
            return None
    return _gmaps


class LocationProvider:
    """Remote location search backend."""

    def search_locations(self, term: str) -> List[LocationCandidate]:
        raise NotImplementedError


class GooglePlacesProvider(LocationProvider):
    """Location search backed by the Places text search API."""

    def __init__(self, client: Optional[googlemaps.Client] = None, language: str = "en"):
        self._client = client
        self.language = language

    def search_locations(self, term: str) -> List[LocationCandidate]:
        client = self._client or _get_client()
        if client is None:
            raise RemoteSearchFailure("Google Maps client is not configured")

        logger.debug(f"Places text search: {term}")
        try:
            response = client.places(query=term, language=self.language)
        except _GOOGLE_ERRORS as e:
            logger.error(f"Places search error for '{term}': {e}")
            raise RemoteSearchFailure(f"Places search failed: {e}") from e

        candidates = parse_places_response(response)
        logger.debug(f"Places search for '{term}' returned {len(candidates)} candidates")
        return candidates


def _candidate_from_result(result: Any) -> LocationCandidate | None:
    if not isinstance(result, dict):
        return None
    place_id = result.get("place_id")
    name = result.get("name")
    location = (result.get("geometry") or {}).get("location") or {}
    coordinate = Coordinate.parse(location.get("lat"), location.get("lng"))
    if not place_id or not name or coordinate is None:
        return None
    return LocationCandidate(
        id=str(place_id),
        name=str(name),
        address=result.get("formatted_address") or "",
        latitude=coordinate.lat,
        longitude=coordinate.lng,
        source="remote",
    )


def parse_places_response(response: Any) -> List[LocationCandidate]:
    """Convert a Places text search payload into candidates.

    Individual results without an id, name or usable coordinate are
    skipped; a payload without a ``results`` list is malformed.
    """
    if not isinstance(response, dict) or not isinstance(response.get("results"), list):
        raise RemoteSearchFailure("Malformed Places response")

    candidates = []
    for result in response["results"]:
        candidate = _candidate_from_result(result)
        if candidate is None:
            logger.debug(f"Skipping unusable Places result: {result!r}")
            continue
        candidates.append(candidate)
    return candidates


# Re-export for clean imports elsewhere
__all__ = [
    "LocationProvider",
    "GooglePlacesProvider",
    "parse_places_response",
]
