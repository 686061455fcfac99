"""
Chunked caching of fetched JSON payloads.

A payload is stored as one entry per top-level element (list index or
object key) so each entry stays under the store's per-entry ceiling,
plus an index entry listing the element keys in order:

    <key>.0, <key>.1, ...        one JSON-serialised element each
    <key>.keys                   {"shape": "array", "keys": [...]}

``<key>`` is the source URL stripped of every non-alphanumeric
character. On a hit the listed entries are read in bulk and reassembled;
entries that expired on their own are skipped. Objects with a top-level
``keys`` member share their entry key with the index and are served
uncached.
"""

import json
import math
import re
from typing import Any, Callable, Dict, List, Optional

from json_connector.common.logging_config import get_structured_logger
from json_connector.common.metrics import cache_entries_written_total, cache_lookups_total
from json_connector.storage.adapter import CacheStore

log = get_structured_logger(__name__)

DEFAULT_EXPIRY_SECONDS = 300
INDEX_SUFFIX = ".keys"
SHAPE_ARRAY = "array"
SHAPE_OBJECT = "object"

NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]+")
LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")


def cache_key_for(url: str) -> str:
    return NON_ALPHANUMERIC.sub("", url)


def parse_expiry_seconds(expiry_minutes_raw: Any, default: int = DEFAULT_EXPIRY_SECONDS) -> int:
    """
    TTL in seconds from a user-entered minute count.

    Takes the leading integer of the input ("5", " 7 min", "3.9" -> 3).
    Missing, unparseable, non-finite or non-positive input gives ``default``.
    """
    if isinstance(expiry_minutes_raw, bool) or expiry_minutes_raw is None:
        return default
    if isinstance(expiry_minutes_raw, (int, float)):
        if not math.isfinite(expiry_minutes_raw):
            return default
        minutes = int(expiry_minutes_raw)
    else:
        match = LEADING_INTEGER.match(str(expiry_minutes_raw))
        if not match:
            return default
        minutes = int(match.group(1))
    if minutes <= 0:
        return default
    return minutes * 60


class ChunkedCache:
    """Two-level (index + entries) cache of JSON payloads over a CacheStore."""

    def __init__(self, store: CacheStore, default_expiry_seconds: int = DEFAULT_EXPIRY_SECONDS):
        self.store = store
        self.default_expiry_seconds = default_expiry_seconds

    def get(self, url: str, producer: Callable[[], Any], expiry_minutes_raw: Any = None) -> Any:
        """
        Cached content for ``url``, calling ``producer`` on a miss.

        Raises:
            CacheValueTooLargeError: If an element exceeds the entry ceiling
            CacheStoreError: If the store cannot be read or written
        """
        key = cache_key_for(url)
        index = self._read_index(key)

        if index is not None:
            cache_lookups_total.labels(result="hit").inc()
            content = self._reassemble(index)
            log.info("Chunked cache hit", url=url, entries=len(index["keys"]))
            return content

        cache_lookups_total.labels(result="miss").inc()
        content = producer()
        ttl = parse_expiry_seconds(expiry_minutes_raw, self.default_expiry_seconds)
        written = self._write(key, content, ttl)
        log.info("Chunked cache miss", url=url, entries=written, ttl_seconds=ttl)
        return content

    def _read_index(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self.store.get(key + INDEX_SUFFIX)
        if not raw:
            return None
        try:
            index = json.loads(raw)
        except ValueError:
            log.warning("Unreadable cache index ignored", key=key)
            return None
        if not isinstance(index, dict) or not index.get("keys"):
            return None
        return index

    def _reassemble(self, index: Dict[str, Any]) -> Any:
        entry_keys: List[str] = index["keys"]
        stored = self.store.get_all(entry_keys)
        present = [k for k in entry_keys if k in stored]

        if index.get("shape") == SHAPE_OBJECT:
            prefix_len = len(index.get("prefix", ""))
            return {k[prefix_len:]: json.loads(stored[k]) for k in present}
        return [json.loads(stored[k]) for k in present]

    def _write(self, key: str, content: Any, ttl: int) -> int:
        if isinstance(content, list):
            shape = SHAPE_ARRAY
            elements = ((str(i), item) for i, item in enumerate(content))
        elif isinstance(content, dict):
            shape = SHAPE_OBJECT
            elements = content.items()
        else:
            # scalars have no top-level elements to chunk
            return 0

        prefix = key + "."
        entries = {prefix + element_key: json.dumps(element, separators=(",", ":"))
                   for element_key, element in elements}
        if not entries:
            return 0
        index_key = key + INDEX_SUFFIX
        if index_key in entries:
            # a top-level "keys" member would be overwritten by the index
            log.warning("Payload not cached, member collides with cache index",
                        key=key, member=index_key[len(prefix):])
            return 0

        self.store.put_all(entries, ttl)
        self.store.put(
            index_key,
            json.dumps({"shape": shape, "prefix": prefix, "keys": list(entries)}),
            ttl,
        )
        cache_entries_written_total.inc(len(entries) + 1)
        return len(entries) + 1
