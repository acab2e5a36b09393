# tripmap/api/services/search_service.py
"""Location search: static gazetteer merged with a remote provider."""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from tripmap.api.config import get_search_config
from tripmap.api.errors import RemoteSearchFailure
from tripmap.api.gazetteer import lookup, synthetic_candidate
from tripmap.api.geocoding import LocationProvider
from tripmap.api.models import LocationCandidate
from tripmap.api.notifications import LoggingNotifier, Notifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchOutcome:
    request_id: int
    term: str
    candidates: Tuple[LocationCandidate, ...] = ()
    too_short: bool = False
    remote_failed: bool = False
    used_fallback: bool = False
    # A newer search started while this one waited on the remote provider
    stale: bool = False

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "term": self.term,
            "results": [c.to_dict() for c in self.candidates],
            "too_short": self.too_short,
            "remote_failed": self.remote_failed,
            "used_fallback": self.used_fallback,
            "stale": self.stale,
        }


def merge_candidates(local: Sequence[LocationCandidate],
                     remote: Sequence[LocationCandidate]) -> List[LocationCandidate]:
    """Local candidates first, then remote ones whose id is not taken yet."""
    merged = list(local)
    seen = {c.id for c in merged}
    for candidate in remote:
        if candidate.id in seen:
            continue
        seen.add(candidate.id)
        merged.append(candidate)
    return merged


class LocationSearchMerger:
    """Runs location searches and holds the result set on display.

    Only the most recently started search may replace the displayed
    results; a slower earlier one is returned marked ``stale``.
    """

    def __init__(self, provider: Optional[LocationProvider] = None,
                 notifier: Optional[Notifier] = None,
                 config: Optional[dict] = None,
                 executor: Optional[ThreadPoolExecutor] = None):
        self.provider = provider
        self.notifier = notifier or LoggingNotifier()
        self.config = config or get_search_config()

        self._executor = executor
        self._lock = threading.Lock()
        self._latest_request = 0
        self._results: Tuple[LocationCandidate, ...] = ()

    @property
    def results(self) -> Tuple[LocationCandidate, ...]:
        with self._lock:
            return self._results

    def _start_request(self) -> int:
        with self._lock:
            self._latest_request += 1
            return self._latest_request

    def _publish(self, request_id: int, candidates: Tuple[LocationCandidate, ...]) -> bool:
        with self._lock:
            if request_id != self._latest_request:
                return False
            self._results = candidates
            return True

    def search(self, term: Optional[str]) -> SearchOutcome:
        """Search the gazetteer and the remote provider for ``term``.

        Never raises: remote problems degrade to local results, and an
        empty merge degrades to a single synthetic candidate.
        """
        cleaned = (term or "").strip()
        request_id = self._start_request()

        if len(cleaned) < self.config["min_term_length"]:
            self._publish(request_id, ())
            self.notifier.notify(
                "Info",
                f"Please enter at least {self.config['min_term_length']} characters to search.",
                "info",
            )
            return SearchOutcome(request_id=request_id, term=cleaned, too_short=True)

        local = lookup(cleaned)

        remote_failed = False
        try:
            remote = self._remote_lookup(cleaned)
        except Exception as e:
            logger.warning(f"Remote location search failed for '{cleaned}', using local results: {e}")
            remote = []
            remote_failed = True

        merged = merge_candidates(local, remote)
        used_fallback = False
        if not merged:
            logger.info(f"No locations found for '{cleaned}', using synthetic fallback")
            merged = [synthetic_candidate(cleaned, self.config)]
            used_fallback = True

        candidates = tuple(merged[: self.config["result_limit"]])
        stale = not self._publish(request_id, candidates)
        if stale:
            logger.debug(f"Discarding stale results for search #{request_id} ('{cleaned}')")

        return SearchOutcome(
            request_id=request_id,
            term=cleaned,
            candidates=candidates,
            remote_failed=remote_failed,
            used_fallback=used_fallback,
            stale=stale,
        )

    def _remote_lookup(self, term: str) -> List[LocationCandidate]:
        if self.provider is None:
            raise RemoteSearchFailure("No remote location provider configured")

        timeout = self.config["remote_timeout_seconds"]
        start_time = time.time()
        future = self._get_executor().submit(self.provider.search_locations, term)
        try:
            results = future.result(timeout=timeout)
        except FutureTimeout as e:
            future.cancel()
            raise RemoteSearchFailure(f"Remote search timed out after {timeout:.1f}s") from e

        if not isinstance(results, (list, tuple)) or not all(
            isinstance(r, LocationCandidate) for r in results
        ):
            raise RemoteSearchFailure("Remote provider returned a malformed result set")

        logger.debug(f"Remote search for '{term}' took {time.time() - start_time:.2f}s")
        return list(results)

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.config.get("remote_workers", 4),
                    thread_name_prefix="location-search",
                )
            return self._executor

    def select(self, candidate_id: str) -> Optional[LocationCandidate]:
        """Pick a displayed candidate; the displayed results are cleared."""
        with self._lock:
            selected = next((c for c in self._results if c.id == candidate_id), None)
            if selected is not None:
                self._results = ()
        if selected is None:
            logger.warning(f"Candidate {candidate_id} is not among the displayed results")
        return selected

    def clear(self) -> None:
        """Drop the displayed results and invalidate any search in flight."""
        with self._lock:
            self._latest_request += 1
            self._results = ()

    def shutdown(self) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False)


__all__ = ["LocationSearchMerger", "SearchOutcome", "merge_candidates"]
