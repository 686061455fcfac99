"""
Schema discovery by flattening a sample JSON row.

Walks one representative object depth-first and emits a field definition
per leaf, using dotted element keys for nested values. Field ids are
normalised (whitespace to underscores, lowercase) and must be unique; a
later definition with an existing id replaces the earlier one.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional

from json_connector.common.errors import FieldIdentificationError, InvalidSchemaError
from json_connector.ingest.semantic_types import (
    ConceptType,
    SemanticType,
    classify,
    concept_type_for,
)

logger = logging.getLogger(__name__)

WHITESPACE = re.compile(r"\s")

DATA_TYPES = {
    SemanticType.NUMBER: "NUMBER",
    SemanticType.BOOLEAN: "BOOLEAN",
}


def normalize_key(key: str) -> str:
    """Normalise a raw key into a field id component."""
    return WHITESPACE.sub("_", key).lower()


@dataclass(frozen=True)
class FieldDefinition:
    """A discovered column."""
    id: str
    name: str
    semantic_type: SemanticType

    @property
    def concept_type(self) -> ConceptType:
        return concept_type_for(self.semantic_type)

    @property
    def is_metric(self) -> bool:
        return self.concept_type == ConceptType.METRIC

    @property
    def path(self) -> List[str]:
        """Path segments used to re-locate the value in a row."""
        return self.id.split(".")

    @property
    def data_type(self) -> str:
        return DATA_TYPES.get(self.semantic_type, "STRING")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "dataType": self.data_type,
            "semanticType": self.semantic_type.value,
            "conceptType": self.concept_type.value,
        }


class FieldSet:
    """Ordered, id-unique collection of field definitions."""

    def __init__(self, fields: Optional[Iterable[FieldDefinition]] = None):
        self._fields: Dict[str, FieldDefinition] = {}
        for field in fields or ():
            self.add(field)

    def add(self, field: FieldDefinition) -> None:
        if field.id in self._fields:
            logger.debug(
                "Field id redefined, last definition wins",
                extra={"extra_fields": {"field_id": field.id, "name": field.name}},
            )
        self._fields[field.id] = field

    def get(self, field_id: str) -> Optional[FieldDefinition]:
        return self._fields.get(field_id)

    def for_ids(self, field_ids: Iterable[str]) -> "FieldSet":
        """Restrict to the given ids in request order; unknown ids are dropped."""
        return FieldSet(
            self._fields[field_id] for field_id in field_ids
            if field_id in self._fields
        )

    def ids(self) -> List[str]:
        return list(self._fields)

    def as_list(self) -> List[FieldDefinition]:
        return list(self._fields.values())

    def build(self) -> List[Dict[str, Any]]:
        return [field.to_dict() for field in self._fields.values()]

    def __iter__(self) -> Iterator[FieldDefinition]:
        return iter(self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._fields


def element_key(parent: Optional[str], current_key: str) -> Optional[str]:
    """
    Dotted key of a child element.

    Only the first '.' inside the raw key is replaced. Empty keys have no
    element key.
    """
    if current_key == "" or current_key is None:
        return None
    escaped = current_key.replace(".", "_", 1)
    if parent is not None:
        return f"{parent}.{escaped}"
    return escaped


class SchemaDiscoverer:
    """
    Discovers field definitions from a sample row.

    With ``inline`` (the default) nested objects are flattened into dotted
    ids. Keys whose value is null are not inlined: they are emitted under
    their bare key and classified from the containing object, which makes
    them TEXT.
    """

    def __init__(self, inline: bool = True):
        self.inline = inline

    def discover(self, sample_row: Any) -> FieldSet:
        if not isinstance(sample_row, dict):
            raise InvalidSchemaError()

        fields = FieldSet()
        try:
            self._create_fields(fields, None, sample_row)
        except FieldIdentificationError:
            raise
        except (TypeError, ValueError, AttributeError) as e:
            raise FieldIdentificationError(e) from e
        return fields

    def discover_content(self, content: Any) -> FieldSet:
        """Discover the schema of a payload from its first row."""
        rows = content if isinstance(content, list) else [content]
        return self.discover(rows[0] if rows else None)

    def _create_fields(self, fields: FieldSet, key: Optional[str], value: Any) -> None:
        if isinstance(value, dict):
            for current_key, child in value.items():
                child_key = element_key(key, current_key)
                if self.inline and child is not None:
                    self._create_fields(fields, child_key, child)
                else:
                    self._create_field(fields, current_key, value)
        else:
            self._create_field(fields, key, value)

    def _create_field(self, fields: FieldSet, key: Optional[str], value: Any) -> None:
        if key is None or key == "":
            raise FieldIdentificationError()
        fields.add(FieldDefinition(
            id=normalize_key(key),
            name=key,
            semantic_type=classify(value),
        ))


def discover(sample_row: Any) -> FieldSet:
    """Discover the inline-flattened schema of a sample row."""
    return SchemaDiscoverer().discover(sample_row)
