"""
Time-bounded in-memory cache for routing provider responses.
"""

import logging
import time
from typing import Callable, Dict, Generic, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TTLCache(Generic[T]):
    """
    Key -> value store where every entry lives ``ttl_seconds`` after its write.

    Expired entries are evicted lazily on lookup; there is no background sweep
    and no size bound, so memory grows with the number of distinct keys seen
    within a TTL window.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # key -> (value, expires_at); tuples are replaced whole, never mutated
        self._entries: Dict[str, Tuple[T, float]] = {}

    def get(self, key: str) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            logger.debug(f"[Cache] Expired {key}")
            return None
        return value

    def set(self, key: str, value: T) -> None:
        self._entries[key] = (value, self._clock() + self.ttl_seconds)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
