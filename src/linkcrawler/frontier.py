"""
Thread-safe frontier: the FIFO of links awaiting fetch plus the set of
every link ever claimed. Owns deduplication.
"""
from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Deque, Optional, Set

from linkcrawler.errors import InternalInvariantViolation
from linkcrawler.urls import canonicalize

logger = logging.getLogger(__name__)


class Frontier:
    """
    Pending queue and seen set behind a single lock.

    A link enters ``seen`` in the same critical section that appends it to
    ``pending``, so two workers discovering the same child can never both
    claim it. ``seen`` only grows.
    """

    def __init__(self, on_claim: Optional[Callable[[], None]] = None) -> None:
        self._lock = threading.Lock()
        self._pending: Deque[str] = deque()
        self._seen: Set[str] = set()
        self.on_claim = on_claim

    def try_claim(self, raw_link: str) -> bool:
        """
        Claim a link for fetching.

        Returns True if the canonical form was unseen and is now queued,
        False if it had already been claimed (no side effect).
        """
        link = canonicalize(raw_link)
        with self._lock:
            if link in self._seen:
                logger.debug("Skipping %s (already seen)", link)
                return False
            self._seen.add(link)
            self._pending.append(link)
        if self.on_claim is not None:
            self.on_claim()
        return True

    def dequeue(self) -> Optional[str]:
        """Pop the oldest pending link, or return None if nothing is pending. Never blocks."""
        with self._lock:
            if not self._pending:
                return None
            link = self._pending.popleft()
            if link not in self._seen:
                raise InternalInvariantViolation(f"pending link {link!r} missing from seen set")
            return link

    def is_empty(self) -> bool:
        """True when nothing is pending. In-flight fetches may still add more."""
        with self._lock:
            return not self._pending

    def seen_count(self) -> int:
        with self._lock:
            return len(self._seen)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)
