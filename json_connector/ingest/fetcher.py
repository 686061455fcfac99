"""
JSON fetcher.

Downloads a URL with httpx and decodes the body as JSON. Transient
connection failures are retried; everything else becomes a connector
error naming the URL.
"""

import json
import logging
from typing import Any, Optional

import httpx

from json_connector.common.errors import InvalidJsonError, TransportError
from json_connector.common.metrics import fetch_requests_total
from json_connector.common.resilience import fetch_retrying

logger = logging.getLogger(__name__)


def _reject_constant(name: str) -> Any:
    # NaN, Infinity and -Infinity are not JSON
    raise ValueError(f"Unexpected token {name}")


class JsonFetcher:
    """Fetches and decodes JSON documents over HTTP."""

    def __init__(
        self,
        timeout: float = 30.0,
        retry_attempts: int = 3,
        user_agent: str = "json-connector/0.1",
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize fetcher.

        Args:
            timeout: Per-request timeout in seconds
            retry_attempts: Attempts for connection/timeout failures
            user_agent: User-Agent header sent upstream
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.timeout = timeout
        self.retry_attempts = retry_attempts
        self.user_agent = user_agent
        self.transport = transport

    def fetch(self, url: str) -> Any:
        """
        GET ``url`` and return the decoded JSON value.

        Raises:
            TransportError: Network failure or non-success status
            InvalidJsonError: Body is not valid JSON
        """
        try:
            response = fetch_retrying(self.retry_attempts)(self._get, url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            fetch_requests_total.labels(status="transport_error").inc()
            logger.warning(
                "Fetch failed",
                extra={"extra_fields": {"url": url, "error": str(e)}},
            )
            raise TransportError(url, e) from e

        try:
            content = json.loads(response.text, parse_constant=_reject_constant)
        except ValueError as e:
            fetch_requests_total.labels(status="invalid_json").inc()
            raise InvalidJsonError(e) from e

        fetch_requests_total.labels(status="success").inc()
        logger.debug(
            "Fetched JSON",
            extra={"extra_fields": {"url": url, "bytes": len(response.content)}},
        )
        return content

    def _get(self, url: str) -> httpx.Response:
        with httpx.Client(
            timeout=self.timeout,
            transport=self.transport,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent, "Accept": "application/json"},
        ) as client:
            return client.get(url)
