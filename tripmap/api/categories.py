"""Icon, colour and vector path for each itinerary category."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from tripmap.api.models import Category


@dataclass(frozen=True)
class CategoryStyle:
    icon: str
    color: str
    path: str

    def to_dict(self) -> dict:
        return {"icon": self.icon, "color": self.color, "path": self.path}


OTHER = "Other"
VISITED_PLACE = "Visited Place"

CATEGORY_STYLES: Dict[str, CategoryStyle] = {
    "Accommodation": CategoryStyle(
        icon="standard:home",
        color="#4CAF50",
        path="M10 20v-6h4v6h5v-8h3L12 3 2 12h3v8z",
    ),
    "Restaurant": CategoryStyle(
        icon="standard:recipe",
        color="#FF9800",
        path=(
            "M8.1 13.34l2.83-2.83L3.91 3.5c-1.56 1.56-1.56 4.09 0 5.66l4.19 4.18zm6.78-1.81"
            "c1.53.71 3.68.21 5.27-1.38 1.91-1.91 2.28-4.65.81-6.12-1.46-1.46-4.2-1.1-6.12.81"
            "-1.59 1.59-2.09 3.74-1.38 5.27L3.7 19.87l1.41 1.41L12 14.41l6.88 6.88 1.41-1.41"
            "L13.41 13l1.47-1.47z"
        ),
    ),
    "Event/Activity": CategoryStyle(
        icon="standard:event",
        color="#9C27B0",
        path=(
            "M17 12h-5v5h5v-5zM16 1v2H8V1H6v2H5c-1.11 0-1.99.9-1.99 2L3 19c0 1.1.89 2 2 2h14"
            "c1.1 0 2-.9 2-2V5c0-1.1-.9-2-2-2h-1V1h-2zm3 18H5V8h14v11z"
        ),
    ),
    "Sightseeing": CategoryStyle(
        icon="standard:photo",
        color="#2196F3",
        path=(
            "M21 19V5c0-1.1-.9-2-2-2H5c-1.1 0-2 .9-2 2v14c0 1.1.9 2 2 2h14c1.1 0 2-.9 2-2z"
            "M8.5 13.5l2.5 3.01L14.5 12l4.5 6H5l3.5-4.5z"
        ),
    ),
    "Transportation": CategoryStyle(
        icon="standard:steps",
        color="#607D8B",
        path="M21 11.01L3 11v2h18zM3 16h18v2H3zM21 6H3v2.01L21 8z",
    ),
    "Shopping": CategoryStyle(
        icon="standard:product",
        color="#E91E63",
        path=(
            "M18 6V4c0-1.1-.9-2-2-2h-4c-1.1 0-2 .9-2 2v2H2v13c0 1.1.9 2 2 2h16c1.1 0 2-.9 2-2V6"
            "h-4zm-6-2h4v2h-4V4zM4 19V8h16v11H4z"
        ),
    ),
    OTHER: CategoryStyle(
        icon="standard:default",
        color="#F44336",
        path=(
            "M12 2C6.48 2 2 6.48 2 12s4.48 10 10 10 10-4.48 10-10S17.52 2 12 2zm0 3c1.66 0 3 "
            "1.34 3 3s-1.34 3-3 3-3-1.34-3-3 1.34-3 3-3zm0 14.2c-2.5 0-4.71-1.28-6-3.22.03-1.99 "
            "4-3.08 6-3.08 1.99 0 5.97 1.09 6 3.08-1.29 1.94-3.5 3.22-6 3.22z"
        ),
    ),
}

VISITED_PLACE_STYLE = CategoryStyle(
    icon="standard:location",
    color="#795548",
    path=(
        "M 12, 2 C 8.13, 2 5, 5.13 5, 9 c 0, 5.25 7, 13 7, 13 s 7, -7.75 7, -13 c 0, -3.87 "
        "-3.13, -7 -7, -7 z m 0, 9.5 c -1.38, 0 -2.5, -1.12 -2.5, -2.5 S 10.62, 9 12, 9 "
        "s 2.5, 1.12 2.5, 2.5 S 13.38, 11.5 12, 11.5 Z"
    ),
)

TEMP_MARKER_STYLE = CategoryStyle(
    icon="standard:location",
    color="#FFEB3B",
    path=(
        "M 12, 2 C 6.48, 2 2, 6.48 2, 12 c 0, 5.52 4.48, 10 10, 10 5.52, 0 10, -4.48 10, -10 "
        "C 22, 6.48 17.52, 2 12, 2 Z"
    ),
)


def style_for(category: Any) -> CategoryStyle:
    """Return the style for ``category``; anything unrecognised gets "Other"."""
    if isinstance(category, Category):
        category = category.value
    if isinstance(category, str) and category in CATEGORY_STYLES:
        return CATEGORY_STYLES[category]
    return CATEGORY_STYLES[OTHER]


__all__ = [
    "CategoryStyle",
    "CATEGORY_STYLES",
    "VISITED_PLACE_STYLE",
    "TEMP_MARKER_STYLE",
    "style_for",
]
