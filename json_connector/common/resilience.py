"""
Retry policies for the connector's outbound calls.

Only transient transport failures are retried; every connector error is
terminal to the request.
"""

import logging
from typing import Callable
from functools import wraps

import httpx
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from tenacity import (
    Retrying,
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
    after_log,
)

logger = logging.getLogger(__name__)


def fetch_retrying(attempts: int = 3) -> Retrying:
    """
    Retry controller for upstream fetches.

    Retries connection and timeout failures with exponential backoff
    (1s, 2s, 4s ... capped at 10s) and re-raises the last failure.
    """
    return Retrying(
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(httpx.TransportError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        after=after_log(logger, logging.DEBUG),
        reraise=True,
    )


def retry_cache_operation(func: Callable) -> Callable:
    """
    Retry decorator for remote cache store operations.

    Retries 3 times with exponential backoff on Redis connection errors.
    """
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(
            (RedisConnectionError, RedisTimeoutError)),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        after=after_log(logger, logging.DEBUG),
        reraise=True,
    )
    @wraps(func)
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)
    return wrapper
