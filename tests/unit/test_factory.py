"""
Tests for the repository factory and pooled connections.
"""

import pytest
from unittest.mock import patch

from mongo_repository import (
    DbConfiguration,
    InvalidConfigurationError,
    create_async_repository,
    create_repository,
    get_repository,
    reset_repositories,
)
from mongo_repository.connection import get_client, reset_async_connections
from tests.helpers.people import AsyncPersonRepository, PersonRepository

ENV = {
    "MONGODB_URI": "mongodb://test:27017",
    "MONGODB_DATABASE": "iTest",
    "MONGODB_COLLECTION": "persons",
}


class TestCreateRepository:
    def test_returns_configured_repository(self, fake_client, db_config):
        repo = create_repository(PersonRepository, db_config)

        assert isinstance(repo, PersonRepository)
        assert repo.configured is True
        assert repo.config is db_config

    def test_loads_config_from_env(self, fake_client):
        with patch.dict("os.environ", ENV, clear=True):
            repo = create_repository(PersonRepository)

        assert repo.config.collection == "persons"
        assert repo.config.db_name == "iTest"

    def test_invalid_env_yields_no_repository(self, mock_mongodb):
        with patch.dict("os.environ", {}, clear=True):
            with pytest.raises(InvalidConfigurationError):
                create_repository(PersonRepository)

        mock_mongodb[0].assert_not_called()

    @pytest.mark.asyncio
    async def test_create_async_repository(self, fake_async_client, db_config):
        repo = await create_async_repository(AsyncPersonRepository, db_config)

        assert isinstance(repo, AsyncPersonRepository)
        assert repo.configured is True


class TestGetRepository:
    """Tests for the environment-configured singletons."""

    def test_singleton_per_class(self, fake_client):
        with patch.dict("os.environ", ENV, clear=True):
            first = get_repository(PersonRepository)
            second = get_repository(PersonRepository)

        assert first is second

    def test_reset_closes_and_forgets(self, fake_client):
        with patch.dict("os.environ", ENV, clear=True):
            first = get_repository(PersonRepository)
            reset_repositories()
            second = get_repository(PersonRepository)

        assert first is not second
        assert first.configured is False
        assert fake_client.closed is True


class TestConnections:
    def test_client_pooled_per_connection_string(self, mock_mongodb):
        mock_client, _ = mock_mongodb

        assert get_client("mongodb://a") is get_client("mongodb://a")
        get_client("mongodb://b")

        assert mock_client.call_count == 2

    @pytest.mark.asyncio
    async def test_reset_async_connections_closes_clients(self, fake_async_client, db_config):
        await create_async_repository(AsyncPersonRepository, db_config)

        await reset_async_connections()

        assert fake_async_client.closed is True
