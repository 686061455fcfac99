"""
Cache store factory.

Provides shared access to the configured cache store backend.
"""

from functools import lru_cache
from typing import Optional

from json_connector.config.settings import Settings, get_settings
from json_connector.storage.adapter import CacheStore
from json_connector.storage.inproc import InMemoryCacheStore
from json_connector.storage.redis import RedisCacheStore


def create_cache_store(settings: Optional[Settings] = None) -> CacheStore:
    """
    Build a cache store from settings.

    Returns:
        CacheStore instance (InMemoryCacheStore or RedisCacheStore)
    """
    settings = settings or get_settings()

    if settings.cache_backend == "redis":
        return RedisCacheStore(
            redis_url=settings.redis_url,
            key_prefix=settings.redis_key_prefix,
            max_entry_bytes=settings.cache_max_entry_bytes,
            default_ttl=settings.cache_store_default_ttl,
            max_ttl=settings.cache_max_ttl,
        )
    return InMemoryCacheStore(
        max_entry_bytes=settings.cache_max_entry_bytes,
        default_ttl=settings.cache_store_default_ttl,
        max_ttl=settings.cache_max_ttl,
    )


@lru_cache()
def get_cache_store() -> CacheStore:
    """Process-wide cache store built from the current settings."""
    return create_cache_store()


def reset_cache_store() -> None:
    """Drop the shared cache store (useful for testing)."""
    if get_cache_store.cache_info().currsize:
        get_cache_store().close()
    get_cache_store.cache_clear()
