"""Trip map services."""

from .marker_service import MarkerProjector, scale_for
from .schedule_service import ScheduleService
from .search_service import LocationSearchMerger, SearchOutcome
from .edit_session import ItineraryEditSession, SessionState
from .trip_map_service import TripMapService
from .session_manager import MapSessionManager

__all__ = [
    'MarkerProjector',
    'scale_for',
    'ScheduleService',
    'LocationSearchMerger',
    'SearchOutcome',
    'ItineraryEditSession',
    'SessionState',
    'TripMapService',
    'MapSessionManager',
]
