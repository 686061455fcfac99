"""
Redis cache store.

Shares cached responses across server instances. Values are stored as
plain strings with ``SET ... EX`` and read back with ``MGET``.
"""

from typing import Dict, Iterable, List, Optional
from urllib.parse import urlparse

import redis
from redis.exceptions import RedisError

from json_connector.common.resilience import retry_cache_operation
from json_connector.storage.adapter import CacheStore, CacheStoreError


class RedisCacheStore(CacheStore):
    """
    Redis-backed cache store.

    Keys are namespaced with ``key_prefix``. Bulk writes go through a
    transactional pipeline so a put_all lands as a whole. Connection
    failures are retried before surfacing as CacheStoreError.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        key_prefix: str = "json_connector:",
        max_entry_bytes: int = 100 * 1024,
        default_ttl: int = 600,
        max_ttl: int = 21600,
        client: Optional[redis.Redis] = None,
    ):
        """
        Initialize Redis cache store.

        Args:
            redis_url: Redis connection URL
            key_prefix: Namespace prepended to every key
            max_entry_bytes: Per-entry ceiling on the UTF-8 encoded value
            default_ttl: TTL in seconds for puts without an explicit TTL
            max_ttl: Upper bound for any TTL
            client: Pre-built client (used by tests)
        """
        super().__init__(max_entry_bytes, default_ttl, max_ttl)
        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self._client = client

        try:
            parsed = urlparse(redis_url)
            self._host = parsed.hostname or "localhost"
            self._port = parsed.port or 6379
            self._db = int(parsed.path.strip('/')) if parsed.path.strip('/') else 0
            self._password = parsed.password
        except ValueError as e:
            raise ValueError(f"Invalid Redis URL: {redis_url}") from e

    def _get_client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.Redis(
                host=self._host,
                port=self._port,
                db=self._db,
                password=self._password,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
        return self._client

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        try:
            return self._get(self._key(key))
        except RedisError as e:
            raise CacheStoreError(f"Failed to read '{key}': {e}") from e

    def get_all(self, keys: Iterable[str]) -> Dict[str, str]:
        keys: List[str] = list(keys)
        if not keys:
            return {}
        try:
            values = self._mget([self._key(k) for k in keys])
        except RedisError as e:
            raise CacheStoreError(f"Failed to read {len(keys)} keys: {e}") from e
        return {k: v for k, v in zip(keys, values) if v is not None}

    def put(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        self.put_all({key: value}, ttl_seconds)

    def put_all(self, values: Dict[str, str], ttl_seconds: Optional[int] = None) -> None:
        for key, value in values.items():
            self.check_size(key, value)
        if not values:
            return
        try:
            self._write(
                {self._key(k): v for k, v in values.items()},
                self.effective_ttl(ttl_seconds),
            )
        except RedisError as e:
            raise CacheStoreError(f"Failed to write {len(values)} keys: {e}") from e

    @retry_cache_operation
    def _get(self, key: str) -> Optional[str]:
        return self._get_client().get(key)

    @retry_cache_operation
    def _mget(self, keys: List[str]) -> List[Optional[str]]:
        return self._get_client().mget(keys)

    @retry_cache_operation
    def _write(self, values: Dict[str, str], ttl: int) -> None:
        pipe = self._get_client().pipeline(transaction=True)
        for key, value in values.items():
            pipe.set(key, value, ex=ttl)
        pipe.execute()

    def ping(self) -> bool:
        try:
            return bool(self._get_client().ping())
        except RedisError:
            return False

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
