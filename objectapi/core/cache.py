"""In-process cache used by the object repository."""
from __future__ import annotations
import copy
import time
from threading import Lock
from typing import Any, Callable, Optional

from cachetools import TTLCache

DEFAULT_MAXSIZE = 1024


class MemoryCache:
    """Bounded key/value cache with time-based expiry (``cachetools.TTLCache``).

    Expired entries are evicted on every write, and the least recently used
    entry goes first once ``maxsize`` is reached. Values are copied on the
    way in and out so callers never share mutable state through the cache.
    """

    def __init__(
        self,
        ttl: int = 300,
        maxsize: int = DEFAULT_MAXSIZE,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self._entries = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
        # TTLCache is not thread-safe
        self._lock = Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            value = self._entries.get(key)
        if value is None:
            return None
        return copy.deepcopy(value)

    def set(self, key: str, value: Any) -> None:
        value = copy.deepcopy(value)
        with self._lock:
            self._entries[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)
