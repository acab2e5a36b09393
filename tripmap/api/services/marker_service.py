# tripmap/api/services/marker_service.py
"""Service layer for turning trip records into map markers."""

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Sequence, Tuple

from tripmap.api.categories import TEMP_MARKER_STYLE, VISITED_PLACE_STYLE, style_for
from tripmap.api.config import get_map_config
from tripmap.api.formatting import format_hours, format_planned_datetime
from tripmap.api.models import (
    Coordinate,
    ItineraryItem,
    MapMarker,
    MapView,
    MarkerIcon,
    VisitedPlace,
)

logger = logging.getLogger(__name__)

ITINERARY_BASE_SCALE = 1.2
VISITED_BASE_SCALE = 1.3
TEMP_BASE_SCALE = 1.5

TEMP_MARKER_VALUE = "temp-marker"

# (minimum zoom, multiplier), checked top to bottom
ZOOM_SCALE_STEPS = ((16, 1.2), (14, 1.0), (11, 0.8), (8, 0.7))
MIN_ZOOM_MULTIPLIER = 0.6


def scale_for(base_scale: float, zoom: int) -> float:
    """Icon scale for ``zoom``: a step function of the base scale."""
    for min_zoom, multiplier in ZOOM_SCALE_STEPS:
        if zoom >= min_zoom:
            return base_scale * multiplier
    return base_scale * MIN_ZOOM_MULTIPLIER


@dataclass(frozen=True)
class Projection:
    markers: Tuple[MapMarker, ...]
    view: MapView


class MarkerProjector:
    """Builds marker descriptors and the initial map view."""

    def __init__(self, config: Optional[dict] = None):
        self.config = config or get_map_config()

    def project(self, items: Iterable[ItineraryItem], places: Iterable[VisitedPlace],
                zoom: int) -> Projection:
        """Project every item and place that has a usable coordinate.

        Args:
            items: Itinerary items of the trip
            places: Visited places of the trip
            zoom: Zoom level the icon scales are computed for

        Returns:
            Projection with the markers (itinerary first, then visited)
            and the initial view
        """
        markers = []
        skipped = 0

        for item in items:
            marker = self.itinerary_marker(item, zoom)
            if marker is None:
                skipped += 1
            else:
                markers.append(marker)

        for place in places:
            marker = self.visited_marker(place, zoom)
            if marker is None:
                skipped += 1
            else:
                markers.append(marker)

        if skipped:
            logger.debug(f"Skipped {skipped} records without usable coordinates")

        return Projection(markers=tuple(markers), view=self.initial_view(markers))

    def itinerary_marker(self, item: ItineraryItem, zoom: int) -> Optional[MapMarker]:
        coordinate = item.coordinate
        if coordinate is None:
            return None

        style = style_for(item.category)
        icon = MarkerIcon(
            path=style.path,
            fill_color=style.color,
            scale=scale_for(ITINERARY_BASE_SCALE, zoom),
            base_scale=ITINERARY_BASE_SCALE,
        )
        return MapMarker(
            value=f"itinerary-{item.id}",
            coordinate=coordinate,
            title=item.name or "Unnamed Itinerary Item",
            description=self.describe(item),
            icon=icon,
        )

    def visited_marker(self, place: VisitedPlace, zoom: int) -> Optional[MapMarker]:
        coordinate = place.coordinate
        if coordinate is None:
            return None

        icon = MarkerIcon(
            path=VISITED_PLACE_STYLE.path,
            fill_color=VISITED_PLACE_STYLE.color,
            scale=scale_for(VISITED_BASE_SCALE, zoom),
            base_scale=VISITED_BASE_SCALE,
        )
        return MapMarker(
            value=f"visited-{place.id}",
            coordinate=coordinate,
            title=place.name or "Visited Place",
            description=f"Visited on: {place.visit_date or 'Unknown date'}",
            icon=icon,
        )

    @staticmethod
    def temp_marker(coordinate: Coordinate, title: str, zoom: int) -> MapMarker:
        """Marker for a location that has been picked but not saved yet."""
        icon = MarkerIcon(
            path=TEMP_MARKER_STYLE.path,
            fill_color=TEMP_MARKER_STYLE.color,
            fill_opacity=0.9,
            stroke_color="#000000",
            stroke_weight=1.5,
            scale=scale_for(TEMP_BASE_SCALE, zoom),
            base_scale=TEMP_BASE_SCALE,
        )
        return MapMarker(
            value=TEMP_MARKER_VALUE,
            coordinate=coordinate,
            title=title or "New Location",
            description="This location will be saved.",
            icon=icon,
        )

    @staticmethod
    def describe(item: ItineraryItem) -> str:
        """Popup text: planned date, duration and notes."""
        if item.planned_at is not None:
            description = format_planned_datetime(item.planned_at)
        else:
            description = "No Planned Date"
        if item.duration_hours is not None:
            description += f" - {format_hours(item.duration_hours)} hr(s)"
        if item.notes:
            description += f": {item.notes}"
        return description.strip()

    @staticmethod
    def rescale(markers: Sequence[MapMarker], zoom: int) -> Tuple[MapMarker, ...]:
        """Recompute icon scales for ``zoom`` from each marker's base scale.

        Only ``icon.scale`` changes, so rescaling any number of times is
        lossless.
        """
        return tuple(
            replace(marker, icon=replace(marker.icon, scale=scale_for(marker.icon.base_scale, zoom)))
            for marker in markers
        )

    def default_view(self) -> MapView:
        return MapView(
            center=Coordinate(self.config["default_lat"], self.config["default_lng"]),
            zoom=self.config["default_zoom"],
            is_default=True,
        )

    def initial_view(self, markers: Sequence[MapMarker]) -> MapView:
        """Center on the first marker; zoom closer when there is only one."""
        if not markers:
            return self.default_view()
        zoom = (
            self.config["single_marker_zoom"] if len(markers) == 1
            else self.config["multi_marker_zoom"]
        )
        return MapView(center=markers[0].coordinate, zoom=zoom)


# Export for use in other modules
__all__ = ["MarkerProjector", "Projection", "scale_for", "TEMP_MARKER_VALUE"]
