"""
Path-based value resolution.

Re-locates a flattened field's value inside a row that may be shaped
differently from the sample the schema was discovered on. Each path
segment is looked up with two strategies in order: an exact key match,
then a scan of the cursor's keys compared in normalised form. A segment
neither strategy matches is skipped and the cursor stays where it is.
"""

from typing import Any, Iterable, Iterator, Tuple

from json_connector.ingest.schema_discoverer import normalize_key

MISSING = object()


def _own_items(cursor: Any) -> Iterator[Tuple[str, Any]]:
    if isinstance(cursor, dict):
        return iter(cursor.items())
    if isinstance(cursor, list):
        return ((str(index), item) for index, item in enumerate(cursor))
    return iter(())


def direct_lookup(cursor: Any, segment: str) -> Any:
    """Value stored under exactly ``segment``, or MISSING."""
    if isinstance(cursor, dict):
        return cursor.get(segment, MISSING)
    if isinstance(cursor, list) and segment.isdigit():
        index = int(segment)
        if index < len(cursor):
            return cursor[index]
    return MISSING


def normalized_lookup(cursor: Any, segment: str) -> Any:
    """Value of the first key whose normalised form equals ``segment``, or MISSING."""
    for key, value in _own_items(cursor):
        if normalize_key(key) == segment:
            return value
    return MISSING


def resolve(path: Iterable[str], row: Any) -> Any:
    """
    Walk ``path`` through ``row`` and return whatever the cursor ends on.

    An explicit null on the way ends the walk with an empty string.
    """
    cursor = row
    for segment in path:
        value = direct_lookup(cursor, segment)
        if value is None:
            return ""
        if value is MISSING:
            value = normalized_lookup(cursor, segment)
            if value is None:
                return ""
        if value is not MISSING:
            cursor = value
    return cursor
