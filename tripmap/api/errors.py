"""Error kinds raised by the trip map engine.

None of these is fatal: each one is recovered either at the session level
(validation, commit) or by retrying the load (fetch). Remote search failures
never reach callers of the search merger at all.
"""

from __future__ import annotations

from typing import Dict

GENERIC_ERROR_MESSAGE = "An unknown error occurred."


class TripMapError(Exception):
    """Base class for trip map errors."""


class FetchFailure(TripMapError):
    """Itinerary items or visited places could not be loaded."""


class RemoteSearchFailure(TripMapError):
    """The remote location provider failed, timed out or sent garbage."""


class ValidationFailure(TripMapError, ValueError):
    """The item draft is not ready to be saved.

    ``fields`` maps each offending field name to a user-facing message.
    """

    def __init__(self, fields: Dict[str, str]):
        self.fields = dict(fields)
        names = ", ".join(sorted(self.fields))
        super().__init__(f"Invalid fields: {names}")


class CommitFailure(TripMapError):
    """Creating the itinerary item failed."""


def error_text(error: BaseException) -> str:
    """Return the message to show a user for ``error``."""
    message = str(error).strip()
    if message:
        return message
    if error.args and error.args[0]:
        return str(error.args[0])
    return GENERIC_ERROR_MESSAGE


__all__ = [
    "TripMapError",
    "FetchFailure",
    "RemoteSearchFailure",
    "ValidationFailure",
    "CommitFailure",
    "error_text",
    "GENERIC_ERROR_MESSAGE",
]
