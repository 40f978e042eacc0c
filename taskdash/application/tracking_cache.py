"""Cached view of the time tracker's open interval.

Render code asks ``is_tracked`` for every visible row on every frame, so the
external query runs at most once per TTL window from ``maybe_refresh`` at the
top of the event cycle. Reads never call out.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from threading import Lock
from typing import Callable, FrozenSet, Optional, Tuple

from taskdash.application.errors import TrackingError

DEFAULT_TTL: float = 5.0

logger = logging.getLogger("taskdash.tracking")


@dataclass(frozen=True)
class ActiveInterval:
    """The tracker's open interval: task uuids from its tags, plus when it began."""

    uuids: FrozenSet[str] = frozenset()
    tags: Tuple[str, ...] = ()
    start: Optional[datetime] = None


class TrackingCache:
    def __init__(
        self,
        query: Callable[[], Optional[ActiveInterval]],
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._query = query
        self.ttl = float(ttl)
        self._clock = clock
        self._lock = Lock()
        self._tracked: FrozenSet[str] = frozenset()
        self._active: Optional[ActiveInterval] = None
        self._last_refresh: Optional[float] = None
        self.last_error: str = ""
        self.refresh_count: int = 0

    @property
    def last_refresh(self) -> Optional[float]:
        return self._last_refresh

    @property
    def active(self) -> Optional[ActiveInterval]:
        """Open interval as of the last refresh, ``None`` when idle."""
        return self._active

    def is_expired(self, now: Optional[float] = None) -> bool:
        ts = self._clock() if now is None else now
        with self._lock:
            if self._last_refresh is None:
                return True
            return ts - self._last_refresh >= self.ttl

    def is_tracked(self, uuid: str) -> bool:
        return uuid in self._tracked

    def snapshot(self) -> FrozenSet[str]:
        return self._tracked

    def invalidate(self) -> None:
        """Force the next ``maybe_refresh`` to query, e.g. after start/stop."""
        with self._lock:
            self._last_refresh = None

    def maybe_refresh(self, now: Optional[float] = None) -> bool:
        """Run the batch query if the entry expired. Returns True if it ran."""
        ts = self._clock() if now is None else now
        with self._lock:
            if self._last_refresh is not None and ts - self._last_refresh < self.ttl:
                return False
            # Stamp before querying so a second caller in the same window skips.
            self._last_refresh = ts
        self.refresh_count += 1
        try:
            active = self._query()
        except (TrackingError, OSError) as exc:
            logger.warning("Tracking refresh failed: %s", exc)
            with self._lock:
                self._tracked = frozenset()
                self._active = None
                self._last_refresh = ts
                self.last_error = str(exc)
            return True
        with self._lock:
            self._active = active
            self._tracked = frozenset(active.uuids) if active is not None else frozenset()
            self._last_refresh = ts
            self.last_error = ""
        return True


__all__ = ["ActiveInterval", "TrackingCache", "DEFAULT_TTL"]
