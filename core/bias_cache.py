"""
Per-station bias correction cache.

One entry per station id, last writer wins. Entries are immutable
BiasCorrection objects swapped in under a lock, so a reader sees either the
old correction or the new one, never a mix. Entries older than the TTL are
treated as missing; a TTL of 0 (or None) keeps them until invalidated.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from core.models import BiasCorrection

logger = logging.getLogger("bias_cache")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BiasCorrectionCache:
    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, BiasCorrection] = {}
        self._lock = threading.Lock()

    def _expired_locked(self, correction: BiasCorrection) -> bool:
        if not self.ttl_seconds:
            return False
        age = self._clock() - correction.computed_at
        return age > timedelta(seconds=self.ttl_seconds)

    def get(self, station_id: str) -> Optional[BiasCorrection]:
        with self._lock:
            correction = self._entries.get(station_id)
            if correction is None:
                return None
            if self._expired_locked(correction):
                logger.debug("Bias correction for %s expired", station_id)
                del self._entries[station_id]
                return None
            return correction

    def set(self, correction: BiasCorrection) -> None:
        with self._lock:
            self._entries[correction.station_id] = correction

    def invalidate(self, station_id: Optional[str] = None) -> int:
        """Drop one station's entry, or all entries. Returns how many were removed."""
        with self._lock:
            if station_id is None:
                removed = len(self._entries)
                self._entries.clear()
            else:
                removed = 1 if self._entries.pop(station_id, None) is not None else 0
        if removed:
            logger.info("Invalidated %d bias correction(s)", removed)
        return removed

    def station_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
