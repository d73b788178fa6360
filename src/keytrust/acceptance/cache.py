"""
AcceptanceCache - memo of the most recently mutated fingerprints.

Only mutating store operations write to it; read paths consult it but never
warm it. A miss always falls through to the database, and under concurrent
writers the content reflects whichever write reached the cache last, so it
is never authoritative.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Iterable, Optional

from keytrust.config.defaults import CACHE_CAPACITY

from .constants import Decision
from .models import CacheEntry

logger = logging.getLogger(__name__)


class AcceptanceCache:
    """
    Bounded LRU of CacheEntry keyed by fingerprint.

    The default capacity of one gives the single-slot behaviour: storing a
    fingerprint evicts whatever was cached before.
    """

    def __init__(self, capacity: int = CACHE_CAPACITY):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def lookup(self, fingerprint: str) -> Optional[CacheEntry]:
        """Return the entry for a fingerprint if it holds a real decision."""
        with self._lock:
            entry = self._entries.get(fingerprint)
            if entry is None:
                return None
            if entry.is_tombstone or entry.decision == Decision.UNDECIDED.value:
                return None
            self._entries.move_to_end(fingerprint)
            return entry

    def store(
        self,
        fingerprint: str,
        decision: str,
        emails: Optional[Iterable[str]] = None,
    ) -> CacheEntry:
        entry = CacheEntry(
            fingerprint=fingerprint,
            decision=decision,
            emails=frozenset(emails) if emails is not None else None,
        )
        with self._lock:
            self._entries[fingerprint] = entry
            self._entries.move_to_end(fingerprint)
            while len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted cached acceptance for {evicted}")
        return entry

    def tombstone(self, fingerprint: str) -> CacheEntry:
        """Mark a fingerprint as deleted; lookups treat it as a miss."""
        return self.store(fingerprint, "", None)

    def invalidate(self, fingerprint: Optional[str] = None) -> None:
        """Drop one fingerprint, or everything when none is given."""
        with self._lock:
            if fingerprint is None:
                self._entries.clear()
            else:
                self._entries.pop(fingerprint, None)

    def peek(self, fingerprint: str) -> Optional[CacheEntry]:
        """Raw entry including tombstones, without touching LRU order."""
        with self._lock:
            return self._entries.get(fingerprint)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
