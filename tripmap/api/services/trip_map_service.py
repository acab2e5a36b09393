# tripmap/api/services/trip_map_service.py
"""Service layer that loads a trip and drives the map view."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Callable, List, Optional, Tuple

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from tripmap.api.config import get_loader_config, get_map_config
from tripmap.api.errors import FetchFailure, error_text
from tripmap.api.models import Coordinate, ItineraryItem, MapMarker, TripMapModel, VisitedPlace
from tripmap.api.notifications import LoggingNotifier, Notifier
from tripmap.api.records import TripRecordSource
from tripmap.api.services.marker_service import MarkerProjector
from tripmap.api.services.schedule_service import ScheduleService, schedule_to_dict

logger = logging.getLogger(__name__)


class TripMapService:
    """Builds TripMapModel instances and derives new ones on user actions.

    Every operation returns a new model; the one passed in is untouched.
    """

    def __init__(self, records: TripRecordSource,
                 notifier: Optional[Notifier] = None,
                 projector: Optional[MarkerProjector] = None,
                 config: Optional[dict] = None,
                 loader_config: Optional[dict] = None):
        self.records = records
        self.notifier = notifier or LoggingNotifier()
        self.config = config or get_map_config()
        self.loader_config = loader_config or get_loader_config()
        self.projector = projector or MarkerProjector(self.config)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, trip_id: str) -> TripMapModel:
        """Fetch the trip's records and build the map and schedule.

        Both record lists must load; if either fails the result is an empty
        model carrying the error message, never a partial map.
        """
        start_time = time.time()
        try:
            items, places = self._fetch_all(trip_id)
        except FetchFailure as e:
            message = error_text(e)
            logger.error(f"Failed to load map data for trip {trip_id}: {message}")
            self.notifier.notify("Error Loading Data", message, "error")
            return TripMapModel(trip_id=trip_id, view=self.projector.default_view(), error=message)

        projection = self.projector.project(items, places, self.config["default_zoom"])
        markers = self.projector.rescale(projection.markers, projection.view.zoom)
        schedule = ScheduleService.bucketize(items)

        duration = time.time() - start_time
        logger.info(
            f"Loaded trip {trip_id}: {len(items)} items, {len(places)} visited places, "
            f"{len(markers)} markers in {duration:.2f}s"
        )
        return TripMapModel(
            trip_id=trip_id,
            view=projection.view,
            markers=markers,
            schedule=schedule,
            items=tuple(items),
        )

    def _fetch_all(self, trip_id: str) -> Tuple[List[ItineraryItem], List[VisitedPlace]]:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="trip-fetch") as pool:
            items_future = pool.submit(self._fetch, self.records.get_itinerary_items, trip_id)
            places_future = pool.submit(self._fetch, self.records.get_visited_places, trip_id)
            return items_future.result(), places_future.result()

    def _fetch(self, fetch: Callable[[str], list], trip_id: str) -> list:
        retrying = Retrying(
            stop=stop_after_attempt(self.loader_config["fetch_attempts"]),
            wait=wait_exponential(
                multiplier=self.loader_config["fetch_backoff_seconds"],
                max=self.loader_config["fetch_backoff_max_seconds"],
            ),
            retry=retry_if_exception_type(FetchFailure),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                try:
                    records = fetch(trip_id)
                except FetchFailure:
                    logger.warning(f"Fetch attempt {attempt.retry_state.attempt_number} "
                                   f"failed for trip {trip_id}")
                    raise
                except Exception as e:
                    logger.warning(f"Fetch attempt {attempt.retry_state.attempt_number} "
                                   f"failed for trip {trip_id}: {e}")
                    raise FetchFailure(error_text(e)) from e
                return list(records or [])

    # ------------------------------------------------------------------
    # View transitions
    # ------------------------------------------------------------------

    def set_zoom(self, model: TripMapModel, zoom: int) -> TripMapModel:
        """Change zoom, clamped to the configured range, and rescale every marker."""
        zoom = max(self.config["min_zoom"], min(int(zoom), self.config["max_zoom"]))
        temp = model.temp_marker
        return replace(
            model,
            view=replace(model.view, zoom=zoom),
            markers=self.projector.rescale(model.markers, zoom),
            temp_marker=self.projector.rescale([temp], zoom)[0] if temp else None,
        )

    def zoom_in(self, model: TripMapModel) -> TripMapModel:
        return self.set_zoom(model, model.view.zoom + 1)

    def zoom_out(self, model: TripMapModel) -> TripMapModel:
        return self.set_zoom(model, model.view.zoom - 1)

    def _center_on(self, model: TripMapModel, coordinate: Coordinate) -> TripMapModel:
        return replace(model, view=replace(model.view, center=coordinate, is_default=False))

    def focus_item(self, model: TripMapModel, item_id: str) -> TripMapModel:
        """Center on an itinerary item, select its marker and zoom in."""
        item = next((i for i in model.items if i.id == item_id), None)
        if item is None or item.coordinate is None:
            logger.debug(f"Item {item_id} has no location on the map; focus ignored")
            return model

        focused = self._center_on(model, item.coordinate)
        focused = replace(focused, selected_marker=f"itinerary-{item_id}")
        return self.set_zoom(focused, self.config["focus_zoom"])

    def select_marker(self, model: TripMapModel, value: str) -> TripMapModel:
        """Select a marker by value and center on it."""
        marker = next((m for m in model.all_markers if m.value == value), None)
        if marker is None:
            logger.debug(f"Marker {value} not found; selection ignored")
            return model
        return replace(self._center_on(model, marker.coordinate), selected_marker=value)

    def with_temp_marker(self, model: TripMapModel, marker: MapMarker) -> TripMapModel:
        """Show the picked location, replacing any previous temp marker."""
        shown = replace(self._center_on(model, marker.coordinate), temp_marker=marker)
        return self.set_zoom(shown, self.config["selection_zoom"])

    def without_temp_marker(self, model: TripMapModel) -> TripMapModel:
        if model.temp_marker is None:
            return model
        return replace(model, temp_marker=None)


def model_to_dict(model: TripMapModel) -> dict:
    return {
        "trip_id": model.trip_id,
        "view": model.view.to_dict(),
        "markers": [m.to_dict() for m in model.all_markers],
        "selected_marker": model.selected_marker,
        "schedule": schedule_to_dict(model.schedule),
        "has_data": model.has_data,
        "error": model.error,
    }


__all__ = ["TripMapService", "model_to_dict"]
