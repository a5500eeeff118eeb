"""
Global fixtures for all unit tests.

This conftest provides autouse fixtures that prevent real external service calls:
- MongoDB connection attempts (would block on server selection per test)
- Environment variable isolation (prevents a developer's .env leaking in)
- Pooled client and singleton reset between tests

These fixtures apply automatically to ALL tests in tests/unit/.
"""

import pytest
from unittest.mock import MagicMock, patch

from mongo_repository import DbConfiguration, connection, factory
from tests.helpers.fake_mongo import AsyncFakeMongoClient, FakeMongoClient


@pytest.fixture(autouse=True)
def mock_mongodb():
    """
    Prevent MongoDB connection attempts in all unit tests.

    Yields the patched client classes so tests can assert they were
    never instantiated.
    """
    with patch("mongo_repository.connection.MongoClient") as mock_client, \
            patch("mongo_repository.connection.AsyncMongoClient") as mock_async_client:
        mock_client.return_value = MagicMock()
        yield mock_client, mock_async_client


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Remove repository settings so each test controls its own."""
    for name in (
        "MONGODB_URI",
        "MONGODB_DATABASE",
        "MONGODB_COLLECTION",
        "MONGODB_AUTO_GENERATE_IDS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_pools():
    """Forget pooled clients and factory singletons around each test."""
    connection._clients.clear()
    connection._async_clients.clear()
    factory._repository_instances.clear()
    yield
    connection._clients.clear()
    connection._async_clients.clear()
    factory._repository_instances.clear()


@pytest.fixture
def fake_client(mock_mongodb):
    """In-memory blocking client returned by every MongoClient(...) call."""
    client = FakeMongoClient()
    mock_mongodb[0].return_value = client
    return client


@pytest.fixture
def fake_async_client(mock_mongodb):
    """In-memory async client returned by every AsyncMongoClient(...) call."""
    client = AsyncFakeMongoClient()
    mock_mongodb[1].return_value = client
    return client


@pytest.fixture
def db_config():
    """Configuration with generated ids (the default)."""
    return DbConfiguration(
        connection_string="mongodb://test:27017",
        db_name="iTest",
        collection="persons",
    )


@pytest.fixture
def caller_ids_config():
    """Configuration keeping caller-supplied ids."""
    return DbConfiguration(
        connection_string="mongodb://test:27017",
        db_name="iTest",
        collection="persons",
        auto_generate_ids=False,
    )
