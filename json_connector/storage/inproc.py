"""
In-process cache store.

Thread-safe dict of (value, expires_at) pairs for a single server process.
Expired entries are dropped lazily on read and on every write.
"""

import threading
import time
from typing import Callable, Dict, Iterable, Optional, Tuple

from json_connector.storage.adapter import CacheStore


class InMemoryCacheStore(CacheStore):
    """
    In-process TTL cache store.

    Mirrors the limits of a hosted user cache: a per-entry size ceiling,
    a default TTL for puts that carry none, and a maximum TTL.
    """

    def __init__(
        self,
        max_entry_bytes: int = 100 * 1024,
        default_ttl: int = 600,
        max_ttl: int = 21600,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize in-process store.

        Args:
            max_entry_bytes: Per-entry ceiling on the UTF-8 encoded value
            default_ttl: TTL in seconds for puts without an explicit TTL
            max_ttl: Upper bound for any TTL
            clock: Monotonic time source (injectable for tests)
        """
        super().__init__(max_entry_bytes, default_ttl, max_ttl)
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._live_value(key, self._clock())

    def get_all(self, keys: Iterable[str]) -> Dict[str, str]:
        with self._lock:
            now = self._clock()
            found = {}
            for key in keys:
                value = self._live_value(key, now)
                if value is not None:
                    found[key] = value
            return found

    def put(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        self.put_all({key: value}, ttl_seconds)

    def put_all(self, values: Dict[str, str], ttl_seconds: Optional[int] = None) -> None:
        for key, value in values.items():
            self.check_size(key, value)

        with self._lock:
            now = self._clock()
            expires_at = now + self.effective_ttl(ttl_seconds)
            self._purge_expired(now)
            for key, value in values.items():
                self._entries[key] = (value, expires_at)

    def size(self) -> int:
        """Number of live entries."""
        with self._lock:
            self._purge_expired(self._clock())
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _live_value(self, key: str, now: float) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= now:
            del self._entries[key]
            return None
        return value

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, (_, expires_at) in self._entries.items()
                   if expires_at <= now]
        for key in expired:
            del self._entries[key]
