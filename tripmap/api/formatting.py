"""Date, time and number formatting for markers and schedules."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional

logger = logging.getLogger(__name__)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a planned timestamp into a naive datetime, or None.

    Accepts datetime objects and ISO-8601 strings (``2025-03-02T09:00``,
    ``2025-03-02T09:00:00.000Z``). An offset is dropped rather than
    applied, so ``2025-03-02T01:00+05:00`` stays at 1:00 AM on Mar 2.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug(f"Unparseable timestamp: {value!r}")
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        # Keep the written wall clock; the item happens on that local day
        parsed = parsed.replace(tzinfo=None)
    return parsed


def _clock(dt: datetime) -> str:
    hour = dt.hour % 12 or 12
    return f"{hour}:{dt:%M} {'AM' if dt.hour < 12 else 'PM'}"


def format_planned_datetime(dt: datetime) -> str:
    """Format as ``Mar 2, 2025, 9:00 AM``."""
    return f"{dt:%b} {dt.day}, {dt.year}, {_clock(dt)}"


def format_time_only(dt: Optional[datetime]) -> str:
    """Format as ``9:00 AM``; empty string for None."""
    if dt is None:
        return ""
    return _clock(dt)


def format_day_label(day_number: int, day: date) -> str:
    """Format a day bucket label, e.g. ``Day 1 - Sunday, Mar 2``."""
    return f"Day {day_number} - {day:%A}, {day:%b} {day.day}"


def format_hours(hours: float) -> str:
    """Render a duration without a trailing ``.0`` (2 -> "2", 1.5 -> "1.5")."""
    return f"{hours:g}"
