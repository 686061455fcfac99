"""
FastAPI middleware for request tracking.

Propagates or generates the X-Request-ID header and tags each request with
the connector operation it targets (schema, data, config ...), so the lines
logged while fetching and caching can be tied back to the request.
"""

import logging
import time
from typing import Callable, Optional
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from json_connector.common.logging_config import (
    clear_request_id,
    get_structured_logger,
    set_request_id,
)

log = get_structured_logger(__name__)

API_PREFIX = "/api/v1/"


def connector_operation(path: str) -> Optional[str]:
    """Connector operation named by an API path, None outside the API."""
    if not path.startswith(API_PREFIX):
        return None
    return path[len(API_PREFIX):].strip("/") or None


class RequestTrackingMiddleware(BaseHTTPMiddleware):
    """Adds X-Request-ID and X-Response-Time-Ms, logs each connector request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_id(request.headers.get("X-Request-ID") or None)
        operation = connector_operation(request.url.path)

        log.info(
            "Incoming request",
            method=request.method,
            path=request.url.path,
            operation=operation,
            client=request.client.host if request.client else None,
        )

        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception as e:
            log.error(
                "Request failed",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
        finally:
            duration_ms = round((time.time() - start_time) * 1000, 2)
            clear_request_id()

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time-Ms"] = str(duration_ms)

        # 4xx here means the connector rejected the source or its config
        level = logging.WARNING if 400 <= response.status_code < 500 else logging.INFO
        log.logger.log(
            level,
            "Request completed",
            extra={"extra_fields": {
                "operation": operation,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "request_id": request_id,
            }},
        )
        return response
