"""
Connector request handling.

Ties fetching, optional chunked caching, schema discovery and row
projection together for one schema or data request. A Connector is built
per request from an explicit ConnectorContext; nothing is shared between
requests except the cache store the context points at.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from json_connector.common.errors import (
    CacheCapacityError,
    EmptyContentError,
    InvalidUrlError,
)
from json_connector.common.logging_config import PerformanceTracker
from json_connector.common.metrics import fields_discovered
from json_connector.config.settings import Settings, get_settings
from json_connector.ingest.fetcher import JsonFetcher
from json_connector.ingest.row_projector import project
from json_connector.ingest.schema_discoverer import FieldSet, SchemaDiscoverer
from json_connector.storage.adapter import CacheStore, CacheStoreError
from json_connector.storage.chunked_cache import ChunkedCache

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"https?://.+")


class ConfigParams(BaseModel):
    """User configuration collected by the host."""
    model_config = ConfigDict(populate_by_name=True)

    url: Optional[str] = None
    cache: bool = False
    cache_expiry_time: Optional[Union[str, int]] = None


class RequestedField(BaseModel):
    name: str


class ConnectorRequest(BaseModel):
    """Schema or data request."""
    model_config = ConfigDict(populate_by_name=True)

    config_params: ConfigParams = Field(default_factory=ConfigParams, alias="configParams")
    fields: Optional[List[RequestedField]] = None


@dataclass
class ConnectorContext:
    """Collaborators a request runs against."""
    settings: Settings
    fetcher: JsonFetcher
    cache_store: CacheStore

    @classmethod
    def from_settings(cls, cache_store: CacheStore, settings: Optional[Settings] = None) -> "ConnectorContext":
        settings = settings or get_settings()
        return cls(
            settings=settings,
            fetcher=JsonFetcher(
                timeout=settings.fetch_timeout_seconds,
                retry_attempts=settings.fetch_retry_attempts,
                user_agent=settings.fetch_user_agent,
            ),
            cache_store=cache_store,
        )


def is_empty_content(content: Any) -> bool:
    """No content: null, empty string, zero or false. Empty containers count as content."""
    if content is None or content is False:
        return True
    if isinstance(content, str):
        return content == ""
    if isinstance(content, (int, float)) and not isinstance(content, bool):
        return content == 0
    return False


def get_config() -> Dict[str, Any]:
    """Configuration form shown to the user."""
    return {
        "configParams": [
            {
                "type": "INFO",
                "name": "instructions",
                "text": "Fill out the form to connect to a JSON data source.",
            },
            {
                "type": "TEXTINPUT",
                "name": "url",
                "displayName": "Enter the URL of a JSON data source",
                "helpText": "e.g. https://jsonplaceholder.typicode.com/users",
                "placeholder": "https://jsonplaceholder.typicode.com/users",
            },
            {
                "type": "CHECKBOX",
                "name": "cache",
                "displayName": "Cache response",
                "helpText": "Useful with big datasets. Response is cached for 5 minutes",
                "isDynamic": False,
                "allowOverride": True,
            },
            {
                "type": "TEXTINPUT",
                "name": "cache_expiry_time",
                "displayName": "How long should response be cached (in minutes)",
                "helpText": (
                    "eg. '3' to cache data for 3 minutes. Also 'Cache response' "
                    "has to be enabled for caching to start."
                ),
                "placeholder": "5",
            },
        ],
        "dateRangeRequired": False,
    }


def get_auth_type() -> Dict[str, str]:
    return {"type": "NONE"}


def is_admin_user() -> bool:
    return True


class Connector:
    """Serves schema and data requests against one context."""

    def __init__(self, context: ConnectorContext):
        self.context = context
        self.discoverer = SchemaDiscoverer()
        self.cache = ChunkedCache(
            context.cache_store,
            default_expiry_seconds=context.settings.cache_default_expiry_seconds,
        )

    def fetch_data(self, config: ConfigParams) -> Any:
        """
        Content for the configured URL, through the chunked cache if enabled.

        Raises:
            InvalidUrlError, TransportError, InvalidJsonError,
            CacheCapacityError, EmptyContentError
        """
        url = config.url
        if not url or not URL_PATTERN.fullmatch(url):
            raise InvalidUrlError(url)

        with PerformanceTracker("fetch_data", logger, url=url, cache=config.cache):
            if config.cache:
                try:
                    content = self.cache.get(
                        url,
                        lambda: self.context.fetcher.fetch(url),
                        config.cache_expiry_time,
                    )
                except CacheStoreError as e:
                    raise CacheCapacityError(e) from e
            else:
                content = self.context.fetcher.fetch(url)

        if is_empty_content(content):
            raise EmptyContentError(url)
        return content

    def get_fields(self, content: Any) -> FieldSet:
        fields = self.discoverer.discover_content(content)
        fields_discovered.observe(len(fields))
        return fields

    def get_schema(self, request: ConnectorRequest) -> Dict[str, Any]:
        content = self.fetch_data(request.config_params)
        fields = self.get_fields(content)
        return {"schema": fields.build()}

    def get_data(self, request: ConnectorRequest) -> Dict[str, Any]:
        content = self.fetch_data(request.config_params)
        fields = self.get_fields(content)
        requested_ids = [field.name for field in request.fields or []]
        requested = fields.for_ids(requested_ids)

        with PerformanceTracker("project_rows", logger, fields=len(requested)):
            rows = project(content, requested)

        return {"schema": requested.build(), "rows": rows}
