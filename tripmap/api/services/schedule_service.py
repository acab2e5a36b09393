# tripmap/api/services/schedule_service.py
"""Service layer for grouping itinerary items into days."""

import logging
from collections import defaultdict
from datetime import date
from typing import Any, Dict, Iterable, List, Tuple

from tripmap.api.categories import style_for
from tripmap.api.formatting import format_day_label, format_hours, format_time_only
from tripmap.api.models import DayBucket, DaySchedule, ItineraryItem

logger = logging.getLogger(__name__)


def schedule_sort_key(item: ItineraryItem) -> Tuple[Any, float]:
    """Ordering inside a day: earlier first, then longer duration first.

    Every place that orders scheduled items goes through this key. A
    missing duration counts as zero.
    """
    return item.planned_at, -(item.duration_hours or 0)


def unscheduled_sort_key(item: ItineraryItem) -> str:
    """Case-insensitive name; unnamed items come first."""
    return (item.name or "").casefold()


class ScheduleService:
    """Builds the day-by-day schedule for a trip."""

    @staticmethod
    def bucketize(items: Iterable[ItineraryItem]) -> DaySchedule:
        """Group items into calendar-day buckets.

        Args:
            items: All itinerary items of a trip

        Returns:
            DaySchedule whose ``days`` are numbered 1..N in date order and
            whose ``unscheduled`` holds every item without a planned time
        """
        by_day: Dict[date, List[ItineraryItem]] = defaultdict(list)
        unscheduled: List[ItineraryItem] = []

        for item in items:
            if item.planned_at is None:
                unscheduled.append(item)
            else:
                by_day[item.planned_at.date()].append(item)

        days = tuple(
            DayBucket(
                date=day,
                day_number=number,
                label=format_day_label(number, day),
                items=tuple(sorted(by_day[day], key=schedule_sort_key)),
            )
            for number, day in enumerate(sorted(by_day), 1)
        )

        logger.debug(f"Bucketized {sum(len(d.items) for d in days)} items into {len(days)} days, "
                     f"{len(unscheduled)} unscheduled")

        return DaySchedule(
            days=days,
            unscheduled=tuple(sorted(unscheduled, key=unscheduled_sort_key)),
        )

    @staticmethod
    def describe_day(schedule: DaySchedule, day_number: int) -> str:
        """Plain-text summary of one day, or of every day when ``day_number`` is 0.

        Args:
            schedule: Bucketized schedule
            day_number: Day to describe (1-based), 0 for an overview

        Returns:
            Summary text
        """
        days = schedule.days
        if not days:
            return "There is nothing scheduled on this trip yet."

        if day_number == 0:
            response = f"Here's your {len(days)}-day schedule: "
            for bucket in days:
                names = ", ".join(item.name or "Unnamed item" for item in bucket.items)
                response += f"{bucket.label}: {names}. "
            return response.strip()

        if not 0 < day_number <= len(days):
            return f"There is no day {day_number}. Your schedule has {len(days)} days."

        bucket = days[day_number - 1]
        response = f"{bucket.label}: "
        for j, item in enumerate(bucket.items, 1):
            response += f"Stop {j}: {item.name or 'Unnamed item'} at {format_time_only(item.planned_at)}"
            if item.duration_hours:
                response += f" for {format_hours(item.duration_hours)} hr(s)"
            response += ". "
        return response.strip()


def _item_to_dict(item: ItineraryItem) -> dict:
    style = style_for(item.category)
    data = item.to_dict()
    data["formatted_time"] = format_time_only(item.planned_at)
    data["icon"] = style.icon
    data["color"] = style.color
    return data


def schedule_to_dict(schedule: DaySchedule) -> dict:
    return {
        "days": [
            {
                "date": bucket.date.isoformat(),
                "day_number": bucket.day_number,
                "label": bucket.label,
                "items": [_item_to_dict(item) for item in bucket.items],
            }
            for bucket in schedule.days
        ],
        "unscheduled": [_item_to_dict(item) for item in schedule.unscheduled],
    }


__all__ = ["ScheduleService", "schedule_sort_key", "unscheduled_sort_key", "schedule_to_dict"]
