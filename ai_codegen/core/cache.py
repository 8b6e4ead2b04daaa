"""
Expiring key/value cache for hot aggregates.

Entries live for a fixed window and are never refreshed by writes to the
ledger. Staleness is bounded by the window alone.
"""

import threading
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

_MISSING = object()


class ExpiringCache:
    """Thread-safe map of key to value with a per-entry expiry."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return default
            return value

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + self.ttl_seconds)

    def get_or_load(
        self,
        key: Hashable,
        loader: Callable[[], Any],
        should_cache: Optional[Callable[[Any], bool]] = None
    ) -> Any:
        """Return the cached value for key, loading it on a miss.

        The loader runs outside the lock, so two concurrent misses on the
        same key may both load; the later write wins.

        Args:
            key: Cache key
            loader: Produces the value on a miss
            should_cache: Decides whether a loaded value is stored

        Returns:
            Cached or freshly loaded value
        """
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value

        value = loader()
        if should_cache is None or should_cache(value):
            self.set(key, value)
        return value

    def invalidate(self, key: Optional[Hashable] = None) -> None:
        """Drop one entry, or all entries when key is None."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for _, expires_at in self._entries.values() if now < expires_at)
