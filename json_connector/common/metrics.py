"""
Prometheus metrics for the connector.

Tracks schema/data requests, upstream fetches, chunked cache lookups and
the number of fields discovered per schema.
"""

import asyncio
import time
from typing import Callable
from functools import wraps
from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
)

REGISTRY = CollectorRegistry()

# ========== Counters ==========

connector_requests_total = Counter(
    "connector_requests_total",
    "Total number of connector requests",
    ["request_type", "status"],  # schema/data, success/failure
    registry=REGISTRY,
)

fetch_requests_total = Counter(
    "fetch_requests_total",
    "Total number of upstream JSON fetches",
    ["status"],  # success/transport_error/invalid_json
    registry=REGISTRY,
)

cache_lookups_total = Counter(
    "cache_lookups_total",
    "Chunked cache lookups",
    ["result"],  # hit/miss
    registry=REGISTRY,
)

cache_entries_written_total = Counter(
    "cache_entries_written_total",
    "Cache entries written, index entries included",
    registry=REGISTRY,
)

# ========== Histograms ==========

request_latency_seconds = Histogram(
    "request_latency_seconds",
    "Time to serve a connector request",
    ["request_type"],  # schema/data
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
    registry=REGISTRY,
)

fields_discovered = Histogram(
    "fields_discovered",
    "Number of fields discovered per schema",
    buckets=(1, 5, 10, 25, 50, 100, 250, 500),
    registry=REGISTRY,
)


# ========== Metric Decorators ==========

def track_request_time(request_type: str):
    """
    Decorator to track connector request latency and outcome.

    Args:
        request_type: Type of request (schema/data)
    """
    def decorator(func: Callable):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.time()
            status = "success"
            try:
                return await func(*args, **kwargs)
            except Exception:
                status = "failure"
                raise
            finally:
                request_latency_seconds.labels(
                    request_type=request_type).observe(time.time() - start_time)
                connector_requests_total.labels(
                    request_type=request_type, status=status).inc()

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            start_time = time.time()
            status = "success"
            try:
                return func(*args, **kwargs)
            except Exception:
                status = "failure"
                raise
            finally:
                request_latency_seconds.labels(
                    request_type=request_type).observe(time.time() - start_time)
                connector_requests_total.labels(
                    request_type=request_type, status=status).inc()

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


def get_metrics() -> bytes:
    """Current metrics in Prometheus exposition format."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
