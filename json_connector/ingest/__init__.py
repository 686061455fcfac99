"""
Ingest module for JSON sources.

Provides semantic type inference, schema discovery, value resolution,
row projection and the per-request connector.
"""

from json_connector.ingest.semantic_types import (
    ConceptType,
    SemanticType,
    classify,
)
from json_connector.ingest.schema_discoverer import (
    FieldDefinition,
    FieldSet,
    SchemaDiscoverer,
    discover,
)
from json_connector.ingest.value_resolver import (
    direct_lookup,
    normalized_lookup,
    resolve,
)
from json_connector.ingest.row_projector import project, validate_value
from json_connector.ingest.fetcher import JsonFetcher
from json_connector.ingest.connector import (
    Connector,
    ConnectorContext,
    ConnectorRequest,
    ConfigParams,
)

__all__ = [  # ruff: noqa: RUF022
    # Type inference
    "SemanticType",
    "ConceptType",
    "classify",
    # Schema discovery
    "FieldDefinition",
    "FieldSet",
    "SchemaDiscoverer",
    "discover",
    # Resolution and projection
    "direct_lookup",
    "normalized_lookup",
    "resolve",
    "project",
    "validate_value",
    # Requests
    "JsonFetcher",
    "Connector",
    "ConnectorContext",
    "ConnectorRequest",
    "ConfigParams",
]
