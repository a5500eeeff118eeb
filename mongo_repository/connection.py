"""
Shared MongoDB clients.

One client per connection string, reused by every repository bound to
it. PyMongo pools connections inside each client, so repositories hold
references only and never close clients themselves.
"""

import logging
from typing import Dict

from pymongo import AsyncMongoClient, MongoClient

logger = logging.getLogger(__name__)

_clients: Dict[str, MongoClient] = {}
_async_clients: Dict[str, AsyncMongoClient] = {}


def get_client(connection_string: str) -> MongoClient:
    """
    Get the pooled client for a connection string, creating it if needed.

    Clients are tz_aware so stored dates come back as UTC datetimes.
    """
    client = _clients.get(connection_string)
    if client is None:
        client = MongoClient(connection_string, tz_aware=True)
        _clients[connection_string] = client
        logger.info("Created new MongoDB client")
    return client


def get_async_client(connection_string: str) -> AsyncMongoClient:
    """Async twin of get_client()."""
    client = _async_clients.get(connection_string)
    if client is None:
        client = AsyncMongoClient(connection_string, tz_aware=True)
        _async_clients[connection_string] = client
        logger.info("Created new async MongoDB client")
    return client


def reset_connections() -> None:
    """
    Close and forget all pooled blocking clients.

    Used for testing or connection recovery.
    """
    for client in _clients.values():
        client.close()
    _clients.clear()
    logger.info("MongoDB connections reset")


async def reset_async_connections() -> None:
    """Close and forget all pooled async clients."""
    for client in _async_clients.values():
        await client.close()
    _async_clients.clear()
    logger.info("Async MongoDB connections reset")
