"""
Cache store abstraction and the chunked cache built on it.

Provides in-process and Redis cache stores.
"""

from json_connector.storage.adapter import (
    CacheStore,
    CacheStoreError,
    CacheValueTooLargeError,
)
from json_connector.storage.inproc import InMemoryCacheStore
from json_connector.storage.redis import RedisCacheStore
from json_connector.storage.chunked_cache import ChunkedCache
from json_connector.storage.factory import (
    create_cache_store,
    get_cache_store,
    reset_cache_store,
)

__all__ = [
    "CacheStore",
    "CacheStoreError",
    "CacheValueTooLargeError",
    "InMemoryCacheStore",
    "RedisCacheStore",
    "ChunkedCache",
    "create_cache_store",
    "get_cache_store",
    "reset_cache_store",
]
