"""
Semantic type inference for scalar JSON values.

Classifies a value into NUMBER, BOOLEAN, URL, DATETIME or TEXT. The
classification drives both the metric/dimension role of a field and the
normalisation applied to its values at projection time.
"""

import math
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any, Optional


class SemanticType(str, Enum):
    """Semantic field types, valued with the host type names."""
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    URL = "URL"
    DATETIME = "YEAR_MONTH_DAY_HOUR"
    TEXT = "TEXT"


class ConceptType(str, Enum):
    """Aggregation role of a field."""
    METRIC = "METRIC"
    DIMENSION = "DIMENSION"


NUMERIC_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

# Scheme-less host + path heuristic: token.tld[/path]
URL_PATTERN = re.compile(
    r"[-a-zA-Z0-9@:%_+.~#?&/=]{2,256}\.[a-z]{2,4}\b(/[-a-zA-Z0-9@:%_+.~#?&/=]*)?",
    re.IGNORECASE,
)

BOOLEAN_STRINGS = {"true", "false"}


def is_finite_number(value: Any) -> bool:
    """True for finite ints/floats and strings holding one."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    if isinstance(value, str):
        text = value.strip()
        return bool(NUMERIC_PATTERN.match(text)) and math.isfinite(float(text))
    return False


def is_boolean(value: Any) -> bool:
    return isinstance(value, bool) or (
        isinstance(value, str) and value in BOOLEAN_STRINGS)


def is_url(value: str) -> bool:
    return URL_PATTERN.search(value) is not None


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a date-time value into an aware UTC datetime.

    Accepts ISO 8601 dates and date-times (``Z`` or numeric offsets),
    RFC 2822 strings, and numbers as epoch milliseconds. Naive values are
    taken as UTC. Returns None when the value cannot be parsed.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    parsed = None
    try:
        iso = text[:-1] + "+00:00" if text[-1] in "zZ" else text
        parsed = datetime.fromisoformat(iso)
    except ValueError:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            return None

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def classify(value: Any) -> SemanticType:
    """
    Classify a value, first matching rule wins.

    Objects, arrays and null fall through to TEXT.
    """
    if is_finite_number(value):
        return SemanticType.NUMBER
    if is_boolean(value):
        return SemanticType.BOOLEAN
    if isinstance(value, str):
        if is_url(value):
            return SemanticType.URL
        if parse_datetime(value) is not None:
            return SemanticType.DATETIME
    return SemanticType.TEXT


def concept_type_for(semantic_type: SemanticType) -> ConceptType:
    if semantic_type == SemanticType.NUMBER:
        return ConceptType.METRIC
    return ConceptType.DIMENSION
