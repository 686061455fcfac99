"""
Row projection onto a requested field list.

Produces one output row per content row with one scalar per requested
field, in request order.
"""

import json
from typing import Any, Dict, Iterable, List

from json_connector.ingest.schema_discoverer import FieldDefinition
from json_connector.ingest.semantic_types import SemanticType, parse_datetime
from json_connector.ingest.value_resolver import resolve


def convert_date(value: Any) -> str:
    """Canonical ``YYYYMMDDHH`` in UTC, or '' when the value is not a date."""
    parsed = parse_datetime(value)
    if parsed is None:
        return ""
    return f"{parsed.year}{parsed.month:02d}{parsed.day:02d}{parsed.hour:02d}"


def validate_value(field: FieldDefinition, value: Any) -> Any:
    """Normalise a resolved value into a column scalar."""
    if field.semantic_type == SemanticType.DATETIME:
        value = convert_date(value)

    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return ""


def project_row(row: Any, requested_fields: Iterable[FieldDefinition]) -> Dict[str, List[Any]]:
    values = []
    for field in requested_fields:
        value = "" if row is None else resolve(field.path, row)
        values.append(validate_value(field, value))
    return {"values": values}


def project(content: Any, requested_fields: Iterable[FieldDefinition]) -> List[Dict[str, List[Any]]]:
    """Project every content row onto ``requested_fields``."""
    rows = content if isinstance(content, list) else [content]
    fields = list(requested_fields)
    return [project_row(row, fields) for row in rows]
