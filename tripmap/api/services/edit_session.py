# tripmap/api/services/edit_session.py
"""State of one "add itinerary item" workflow."""

import logging
import math
import threading
from enum import Enum
from typing import Any, Callable, Dict, Optional

from tripmap.api.config import get_map_config
from tripmap.api.errors import CommitFailure, ValidationFailure, error_text
from tripmap.api.formatting import parse_timestamp
from tripmap.api.models import Category, ItemDraft, LocationCandidate, MapMarker
from tripmap.api.notifications import LoggingNotifier, Notifier
from tripmap.api.records import TripRecordSource
from tripmap.api.services.marker_service import MarkerProjector
from tripmap.api.services.search_service import LocationSearchMerger, SearchOutcome

logger = logging.getLogger(__name__)

DRAFT_FIELDS = ("name", "notes", "category", "planned_at", "duration")


class SessionState(str, Enum):
    EMPTY = "empty"
    SEARCHING = "searching"
    CANDIDATE_SELECTED = "candidate_selected"
    VALIDATING = "validating"
    SAVING = "saving"


def parse_duration(value: Any) -> Optional[float]:
    """Parse the duration field.

    Returns None for an empty value. Raises ValueError for anything that
    is not a finite, non-negative number.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise ValueError("not a number")
    hours = float(value)
    if math.isnan(hours) or math.isinf(hours) or hours < 0:
        raise ValueError("not a non-negative number")
    return hours


class ItineraryEditSession:
    """Draft fields, picked location and the saving guard for one modal.

    Args:
        trip_id: Trip the new item belongs to
        records: Collaborator used to create the item
        merger: Location search used by the modal
        notifier: Sink for user-facing messages
        projector: Builds the temp marker for the picked location
        on_committed: Called with the new item id after a successful save,
            typically to reload the trip
    """

    def __init__(self, trip_id: str, records: TripRecordSource,
                 merger: Optional[LocationSearchMerger] = None,
                 notifier: Optional[Notifier] = None,
                 projector: Optional[MarkerProjector] = None,
                 on_committed: Optional[Callable[[str], None]] = None,
                 config: Optional[dict] = None):
        self.trip_id = trip_id
        self.records = records
        self.notifier = notifier or LoggingNotifier()
        self.merger = merger or LocationSearchMerger(notifier=self.notifier)
        self.config = config or get_map_config()
        self.projector = projector or MarkerProjector(self.config)
        self.on_committed = on_committed

        self._lock = threading.RLock()

        self.state = SessionState.EMPTY
        self.draft = ItemDraft()
        self.search_term = ""
        self.selected: Optional[LocationCandidate] = None
        self.temp_marker: Optional[MapMarker] = None
        self.saving = False
        self.last_error: Optional[str] = None
        self.last_committed_id: Optional[str] = None

        # Bumped by every reset; a save only owns the draft of its own generation
        self._generation = 0
        self._save_generation: Optional[int] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Start a fresh draft.

        A save already in flight keeps running and keeps ``saving`` set
        until it finishes; only the commit that set the flag clears it.
        """
        with self._lock:
            self._generation += 1
            self.state = SessionState.EMPTY
            self.draft = ItemDraft()
            self.search_term = ""
            self.selected = None
            self.temp_marker = None
            self.last_error = None
        self.merger.clear()

    def _draft_is_saving(self) -> bool:
        """True while the current draft is the one being saved."""
        return self.saving and self._save_generation == self._generation

    def open(self) -> None:
        self.reset()
        logger.debug(f"Opened add-item session for trip {self.trip_id}")

    def close(self) -> None:
        self.reset()
        logger.debug(f"Closed add-item session for trip {self.trip_id}")

    # ------------------------------------------------------------------
    # Draft & location
    # ------------------------------------------------------------------

    def update_draft(self, **fields: Any) -> ItemDraft:
        unknown = set(fields) - set(DRAFT_FIELDS)
        if unknown:
            raise ValueError(f"Unknown draft fields: {', '.join(sorted(unknown))}")
        for name, value in fields.items():
            setattr(self.draft, name, "" if value is None else value)
        return self.draft

    @property
    def results(self):
        return self.merger.results

    def search(self, term: Optional[str]) -> SearchOutcome:
        self.search_term = term or ""
        if self.selected is None:
            self.state = SessionState.SEARCHING
        return self.merger.search(term)

    def select_candidate(self, candidate_id: str) -> Optional[LocationCandidate]:
        """Pick a search result; its name pre-fills the item name.

        Returns None, leaving the displayed results alone, when the id is
        not displayed, the candidate has no usable coordinate, or the
        current draft is being saved.
        """
        if self._draft_is_saving():
            logger.info(f"Save in progress for trip {self.trip_id}; location change ignored")
            return None

        candidate = next((c for c in self.merger.results if c.id == candidate_id), None)
        if candidate is None:
            logger.warning(f"Candidate {candidate_id} is not among the displayed results")
            return None

        coordinate = candidate.coordinate
        if coordinate is None:
            logger.warning(f"Candidate {candidate.id} has no usable coordinate")
            return None

        if self.merger.select(candidate_id) is None:
            # A newer search replaced the results in the meantime
            return None

        self.selected = candidate
        self.search_term = candidate.name
        self.draft.name = candidate.name
        self.temp_marker = self.projector.temp_marker(
            coordinate, candidate.name, self.config["selection_zoom"]
        )
        self.state = SessionState.CANDIDATE_SELECTED
        logger.info(f"Selected location {candidate.id} ({candidate.name}) for trip {self.trip_id}")
        return candidate

    def clear_selection(self) -> bool:
        """Drop the picked location; refused while it is being saved."""
        with self._lock:
            if self._draft_is_saving():
                logger.info(f"Save in progress for trip {self.trip_id}; keeping the selected location")
                return False
            self.selected = None
            self.search_term = ""
            self.temp_marker = None
            self.state = SessionState.EMPTY
            return True

    # ------------------------------------------------------------------
    # Validation & commit
    # ------------------------------------------------------------------

    def validate(self) -> Dict[str, str]:
        """Return ``{field: message}`` for every problem with the draft."""
        errors: Dict[str, str] = {}

        if not str(self.draft.name or "").strip():
            errors["name"] = "Item name is required."

        try:
            parse_duration(self.draft.duration)
        except (TypeError, ValueError):
            errors["duration"] = "Please enter a valid positive number or leave blank."

        planned = self.draft.planned_at
        if planned not in (None, "") and parse_timestamp(planned) is None:
            errors["planned_at"] = "Please enter a valid date and time."

        if self.draft.category and not Category.is_known(self.draft.category):
            errors["category"] = "Please choose a valid category."

        if self.selected is None:
            errors["location"] = "Please search for and select a location."

        return errors

    def build_payload(self) -> Dict[str, Any]:
        """Creation payload for the item; call only on a valid draft."""
        return {
            "trip_id": self.trip_id,
            "name": str(self.draft.name).strip(),
            "notes": self.draft.notes or "",
            "category": self.draft.category or None,
            "planned_at": parse_timestamp(self.draft.planned_at),
            "duration_hours": parse_duration(self.draft.duration),
            "latitude": self.selected.latitude,
            "longitude": self.selected.longitude,
        }

    def commit(self) -> Optional[str]:
        """Validate and save the draft.

        Returns:
            The new item id, or None if a save is already in progress

        Raises:
            ValidationFailure: The draft is incomplete; nothing was saved
            CommitFailure: The item could not be created; the draft and the
                picked location are kept
        """
        with self._lock:
            if self.saving:
                logger.info(f"Save already in progress for trip {self.trip_id}; ignoring")
                return None

            previous_state = self.state
            self.state = SessionState.VALIDATING
            errors = self.validate()
            if errors:
                self.state = previous_state
            else:
                payload = self.build_payload()
                self.saving = True
                self._save_generation = self._generation
                self.state = SessionState.SAVING

        if errors:
            logger.info(f"Validation failed for trip {self.trip_id}: {sorted(errors)}")
            if "location" in errors:
                self.notifier.notify("Error", errors["location"], "error")
            self.notifier.notify("Error", "Please review the errors on the form.", "error")
            raise ValidationFailure(errors)

        logger.info(f"Saving itinerary item '{payload['name']}' for trip {self.trip_id}")
        try:
            item_id = self.records.create_itinerary_item(payload)
        except Exception as e:
            message = error_text(e)
            logger.error(f"Error creating itinerary item for trip {self.trip_id}: {message}")
            with self._lock:
                own_draft = self._finish_save()
                if own_draft:
                    self.last_error = message
                    self.state = (
                        SessionState.CANDIDATE_SELECTED if self.selected is not None
                        else SessionState.EMPTY
                    )
            self.notifier.notify("Error Saving Item", message, "error")
            raise CommitFailure(message) from e

        with self._lock:
            # A draft started while saving belongs to the user; leave it alone
            if self._finish_save():
                self.reset()
            self.last_committed_id = item_id

        self.notifier.notify("Success", "Itinerary item added successfully!", "success")
        if self.on_committed is not None:
            self.on_committed(item_id)
        return item_id

    def _finish_save(self) -> bool:
        """Clear the saving guard; True if the saved draft is still the current one."""
        own_draft = self._save_generation == self._generation
        self.saving = False
        self._save_generation = None
        return own_draft

    def to_dict(self) -> dict:
        return {
            "trip_id": self.trip_id,
            "state": self.state.value,
            "draft": self.draft.to_dict(),
            "search_term": self.search_term,
            "results": [c.to_dict() for c in self.results],
            "selected": self.selected.to_dict() if self.selected else None,
            "temp_marker": self.temp_marker.to_dict() if self.temp_marker else None,
            "saving": self.saving,
            "last_error": self.last_error,
        }


__all__ = ["ItineraryEditSession", "SessionState", "parse_duration"]
