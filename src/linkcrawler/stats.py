"""
Request counters for one crawl run.
"""
from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from typing import Dict

from linkcrawler.fetcher import FetchOutcome, FetchSuccess


@dataclass(frozen=True, slots=True)
class CrawlStats:
    """Immutable snapshot of a run's counters."""
    requests: int = 0
    successes: int = 0
    failures: int = 0
    elapsed_seconds: float = 0.0

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


class StatsCollector:
    """
    Counters updated once per completed fetch.

    ``requests`` and exactly one of ``successes``/``failures`` move together
    under one lock, so ``requests == successes + failures`` at every read.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._requests = 0
        self._successes = 0
        self._failures = 0

    def record(self, outcome: FetchOutcome) -> None:
        with self._lock:
            self._requests += 1
            if isinstance(outcome, FetchSuccess):
                self._successes += 1
            else:
                self._failures += 1

    @property
    def requests(self) -> int:
        with self._lock:
            return self._requests

    @property
    def successes(self) -> int:
        with self._lock:
            return self._successes

    @property
    def failures(self) -> int:
        with self._lock:
            return self._failures

    def snapshot(self, elapsed_seconds: float = 0.0) -> CrawlStats:
        with self._lock:
            return CrawlStats(
                requests=self._requests,
                successes=self._successes,
                failures=self._failures,
                elapsed_seconds=elapsed_seconds,
            )
