"""Notification sinks (the toast messages shown to the user)."""

import logging
import threading
from dataclasses import dataclass
from typing import List

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass(frozen=True)
class Notification:
    title: str
    message: str
    severity: str = "info"

    def to_dict(self) -> dict:
        return {"title": self.title, "message": self.message, "severity": self.severity}


class Notifier:
    """Fire-and-forget sink; callers never look at a return value."""

    def notify(self, title: str, message: str, severity: str = "info") -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Writes every notification to the log."""

    def notify(self, title: str, message: str, severity: str = "info") -> None:
        level = _LOG_LEVELS.get(severity, logging.INFO)
        logger.log(level, f"[{severity}] {title}: {message}")


class CollectingNotifier(LoggingNotifier):
    """Logs notifications and keeps them until the next drain()."""

    def __init__(self):
        self._pending: List[Notification] = []
        self._lock = threading.Lock()

    def notify(self, title: str, message: str, severity: str = "info") -> None:
        super().notify(title, message, severity)
        with self._lock:
            self._pending.append(Notification(title, message, severity))

    @property
    def pending(self) -> List[Notification]:
        with self._lock:
            return list(self._pending)

    def drain(self) -> List[Notification]:
        """Return and forget all pending notifications."""
        with self._lock:
            pending, self._pending = self._pending, []
        return pending
