"""
Abstract base class for cache store backends.

A cache store is a key/value store of strings with a TTL per entry, a
per-entry size ceiling and bulk get/put. It guarantees atomic get/put per
key and nothing across keys.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional


class CacheStoreError(Exception):
    """Exception raised for cache store errors."""
    pass


class CacheValueTooLargeError(CacheStoreError):
    """A value exceeds the store's per-entry size ceiling."""

    def __init__(self, key: str, size: int, limit: int):
        super().__init__(
            f"Value for '{key}' is {size} bytes, limit is {limit} bytes")
        self.key = key
        self.size = size
        self.limit = limit


class CacheStore(ABC):
    """
    Abstract base class for cache stores.

    All implementations (in-process, Redis) must implement these methods
    so the chunked cache can run on top of any of them.
    """

    def __init__(self, max_entry_bytes: int, default_ttl: int, max_ttl: int):
        self.max_entry_bytes = max_entry_bytes
        self.default_ttl = default_ttl
        self.max_ttl = max_ttl

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Get a single value.

        Returns:
            The stored string, or None if absent or expired
        """
        pass

    @abstractmethod
    def get_all(self, keys: Iterable[str]) -> Dict[str, str]:
        """
        Get several values at once.

        Returns:
            Mapping of the keys that were found to their values; absent
            or expired keys are left out
        """
        pass

    @abstractmethod
    def put(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        """
        Store a value.

        Raises:
            CacheValueTooLargeError: If the value exceeds the entry ceiling
            CacheStoreError: If the store cannot be written
        """
        pass

    @abstractmethod
    def put_all(self, values: Dict[str, str], ttl_seconds: Optional[int] = None) -> None:
        """
        Store several values with the same TTL.

        Raises:
            CacheValueTooLargeError: If any value exceeds the entry ceiling;
                nothing is written in that case
            CacheStoreError: If the store cannot be written
        """
        pass

    def ping(self) -> bool:
        """Check the store is reachable."""
        return True

    def close(self) -> None:
        """Release resources held by the store."""
        pass

    def effective_ttl(self, ttl_seconds: Optional[int]) -> int:
        """TTL to apply: the store default when unset, clamped to [1, max_ttl]."""
        ttl = self.default_ttl if ttl_seconds is None else int(ttl_seconds)
        return max(1, min(ttl, self.max_ttl))

    def check_size(self, key: str, value: str) -> None:
        size = len(value.encode("utf-8"))
        if size > self.max_entry_bytes:
            raise CacheValueTooLargeError(key, size, self.max_entry_bytes)
