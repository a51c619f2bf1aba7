"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
from datetime import datetime, timedelta, timezone

import httpx
import pytest
import pytest_asyncio

from learnsync.content.bundled import BundledDataset
from learnsync.core.learn_client import LearnApiClient
from learnsync.storage.kv_store import KeyValueStore


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class FakeClock:
    """Deterministic, manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "store.db"


@pytest.fixture
def store(store_path):
    kv = KeyValueStore(store_path)
    yield kv
    kv.close()


@pytest.fixture(scope="session")
def dataset():
    return BundledDataset.load()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sample_classes():
    """Remote payload for GET /learn/classes."""
    return [
        {"_id": "691eafac8eb433fec69cf13a", "classNumber": 6, "name": "Class 6"},
        {"_id": "691eafac8eb433fec69cf13b", "classNumber": 7, "name": "Class 7"},
    ]


@pytest_asyncio.fixture
async def make_client():
    """Build LearnApiClient instances backed by an httpx.MockTransport handler."""
    clients = []

    def factory(handler) -> LearnApiClient:
        client = LearnApiClient(
            base_url="http://learn.test/api",
            token="test-token",
            timeout_seconds=1.0,
            transport=httpx.MockTransport(handler),
        )
        clients.append(client)
        return client

    yield factory
    for client in clients:
        await client.close()
