# Test configuration

import pytest
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from json_connector.common.logging_config import clear_request_id  # noqa: E402
from json_connector.config.settings import Settings  # noqa: E402
from json_connector.ingest.connector import Connector, ConnectorContext  # noqa: E402
from json_connector.storage.inproc import InMemoryCacheStore  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFetcher:
    """Fetcher returning canned payloads per URL and counting calls."""

    def __init__(self, payloads=None, error=None):
        self.payloads = payloads or {}
        self.error = error
        self.calls = []

    def fetch(self, url):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.payloads[url]


@pytest.fixture
def test_settings():
    """Override settings for testing"""
    return Settings(
        cache_backend="inproc",
        fetch_retry_attempts=1,
        log_json=False,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store(clock):
    return InMemoryCacheStore(max_entry_bytes=1024, default_ttl=600, max_ttl=21600, clock=clock)


@pytest.fixture
def make_connector(test_settings, memory_store):
    """Build a connector around a FakeFetcher serving the given payloads."""
    def _make(payloads=None, error=None, store=None):
        fetcher = FakeFetcher(payloads, error)
        context = ConnectorContext(
            settings=test_settings,
            fetcher=fetcher,
            cache_store=store or memory_store,
        )
        return Connector(context), fetcher
    return _make


@pytest.fixture(autouse=True)
def _reset_request_id():
    yield
    clear_request_id()
