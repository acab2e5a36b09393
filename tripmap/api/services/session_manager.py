# tripmap/api/services/session_manager.py
"""Lifecycle of per-browser map sessions."""

import logging
import secrets
import threading
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from tripmap.api.config import get_session_config
from tripmap.api.geocoding import LocationProvider
from tripmap.api.models import TripMapModel
from tripmap.api.notifications import CollectingNotifier
from tripmap.api.records import TripRecordSource
from tripmap.api.services.edit_session import ItineraryEditSession
from tripmap.api.services.search_service import LocationSearchMerger
from tripmap.api.services.trip_map_service import TripMapService

logger = logging.getLogger(__name__)


class MapSession:
    """Map model and add-item workflow of one browser session for one trip."""

    def __init__(self, session_id: str, trip_id: str, service: TripMapService,
                 edit: ItineraryEditSession, notifier: CollectingNotifier):
        self.session_id = session_id
        self.trip_id = trip_id
        self.service = service
        self.edit = edit
        self.notifier = notifier
        self.model: Optional[TripMapModel] = None

        # Timestamps
        self.created_at = datetime.now()
        self.last_activity = datetime.now()

    def reload(self) -> TripMapModel:
        """Reload the trip; a picked-but-unsaved location stays on the map."""
        model = self.service.load(self.trip_id)
        if self.edit.temp_marker is not None:
            model = self.service.with_temp_marker(model, self.edit.temp_marker)
        self.model = model
        return model

    def touch(self) -> None:
        self.last_activity = datetime.now()


class MapSessionManager:
    """Creates, looks up and expires map sessions."""

    def __init__(self, records: TripRecordSource,
                 provider: Optional[LocationProvider] = None,
                 config: Optional[dict] = None,
                 map_config: Optional[dict] = None,
                 search_config: Optional[dict] = None,
                 loader_config: Optional[dict] = None):
        self.records = records
        self.provider = provider
        self.config = config or get_session_config()
        self.map_config = map_config
        self.search_config = search_config
        self.loader_config = loader_config
        self.sessions: Dict[str, MapSession] = {}

        # Thread safety
        self.lock = threading.Lock()

        logger.info("MapSessionManager initialized")

    def create_session(self, trip_id: str) -> Optional[MapSession]:
        """Create a session for ``trip_id`` and load its map.

        Returns:
            MapSession, or None when the session limit is reached
        """
        self._cleanup_expired_sessions()

        with self.lock:
            if len(self.sessions) >= self.config["max_sessions"]:
                logger.warning("Maximum number of map sessions reached")
                return None
            session_id = f"map_{secrets.token_urlsafe(16)}"

        notifier = CollectingNotifier()
        service = TripMapService(
            self.records,
            notifier=notifier,
            config=self.map_config,
            loader_config=self.loader_config,
        )
        merger = LocationSearchMerger(self.provider, notifier=notifier, config=self.search_config)
        edit = ItineraryEditSession(
            trip_id,
            self.records,
            merger=merger,
            notifier=notifier,
            projector=service.projector,
            config=service.config,
        )
        session = MapSession(session_id, trip_id, service, edit, notifier)
        # A successful save reloads the whole trip
        edit.on_committed = lambda item_id: session.reload()

        with self.lock:
            self.sessions[session_id] = session

        session.reload()
        logger.info(f"Created map session {session_id} for trip {trip_id}")
        return session

    def get_session(self, session_id: str) -> Optional[MapSession]:
        with self.lock:
            session = self.sessions.get(session_id)
            if session:
                session.touch()
            return session

    def remove_session(self, session_id: str) -> None:
        with self.lock:
            session = self.sessions.pop(session_id, None)
        if session is not None:
            session.edit.merger.shutdown()
            logger.info(f"Removed map session {session_id}")

    def get_stats(self) -> Dict[str, Any]:
        with self.lock:
            return {
                "total_sessions": len(self.sessions),
                "trips": len({s.trip_id for s in self.sessions.values()}),
                "saving_sessions": sum(1 for s in self.sessions.values() if s.edit.saving),
                "config": {
                    "max_sessions": self.config["max_sessions"],
                    "timeout_seconds": self.config["session_timeout_seconds"],
                },
            }

    def _cleanup_expired_sessions(self) -> None:
        """Remove sessions that have exceeded the timeout."""
        cutoff_time = datetime.now() - timedelta(seconds=self.config["session_timeout_seconds"])

        with self.lock:
            expired_sessions = [
                sid for sid, session in self.sessions.items()
                if session.last_activity < cutoff_time
            ]

        for sid in expired_sessions:
            self.remove_session(sid)

        if expired_sessions:
            logger.info(f"Cleaned up {len(expired_sessions)} expired map sessions")


__all__ = ["MapSession", "MapSessionManager"]
