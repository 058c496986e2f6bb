# src/jobagg/cache.py
"""
Single-slot freshness cache for the last aggregated job list.

The snapshot is immutable and swapped in one assignment under a lock, so a
reader gets either the previous complete list or the new complete list.
"""

from __future__ import annotations
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple

from jobagg.models import NormalizedJob

DEFAULT_TTL_S = 5 * 60


@dataclass(frozen=True)
class CacheSnapshot:
    jobs: Tuple[NormalizedJob, ...]
    captured_at: float  # epoch seconds


class FreshnessCache:
    def __init__(self, ttl_s: float = DEFAULT_TTL_S, clock: Callable[[], float] = time.time):
        self.ttl_s = ttl_s
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: Optional[CacheSnapshot] = None

    def get(self) -> Optional[CacheSnapshot]:
        with self._lock:
            return self._snapshot

    def put(self, jobs: Iterable[NormalizedJob]) -> CacheSnapshot:
        # build outside the lock; only the swap is serialized
        snapshot = CacheSnapshot(tuple(jobs), self._clock())
        with self._lock:
            self._snapshot = snapshot
        return snapshot

    def is_valid(self) -> bool:
        snapshot = self.get()
        if snapshot is None:
            return False
        return self._clock() - snapshot.captured_at < self.ttl_s

    def age_s(self) -> Optional[float]:
        snapshot = self.get()
        return None if snapshot is None else self._clock() - snapshot.captured_at

    def clear(self) -> None:
        with self._lock:
            self._snapshot = None
