"""
Repository Factory

Builds repositories that are already configured, so callers going
through this module never hold an unconfigured repository. Also keeps
one environment-configured instance per repository class for
connection reuse.
"""

import logging
from typing import Dict, Optional, Type, TypeVar

from .async_repository import AsyncMongoDbRepository
from .config import DbConfiguration
from .connection import reset_connections
from .repository import MongoDbRepository

logger = logging.getLogger(__name__)

TRepository = TypeVar("TRepository", bound=MongoDbRepository)
TAsyncRepository = TypeVar("TAsyncRepository", bound=AsyncMongoDbRepository)


def create_repository(
    repository_cls: Type[TRepository],
    config: Optional[DbConfiguration] = None,
) -> TRepository:
    """
    Create and configure a repository.

    Args:
        repository_cls: MongoDbRepository subclass to instantiate
        config: Binding to apply (defaults to DbConfiguration.from_env())

    Returns:
        Configured repository

    Raises:
        InvalidConfigurationError: If the configuration is incomplete
    """
    repository = repository_cls()
    repository.configure(config or DbConfiguration.from_env())
    return repository


async def create_async_repository(
    repository_cls: Type[TAsyncRepository],
    config: Optional[DbConfiguration] = None,
) -> TAsyncRepository:
    """Async twin of create_repository()."""
    repository = repository_cls()
    await repository.configure(config or DbConfiguration.from_env())
    return repository


# Singleton repository instances, one per class
_repository_instances: Dict[type, MongoDbRepository] = {}


def get_repository(repository_cls: Type[TRepository]) -> TRepository:
    """
    Get the environment-configured repository for a class.

    Created on first use from DbConfiguration.from_env() and reused
    afterwards for connection pooling.

    Raises:
        InvalidConfigurationError: If MONGODB_URI or the collection is not configured
    """
    repository = _repository_instances.get(repository_cls)
    if repository is None:
        repository = create_repository(repository_cls)
        _repository_instances[repository_cls] = repository
        logger.info(f"Initialized {repository_cls.__name__}")
    return repository


def reset_repositories() -> None:
    """
    Reset all repository singletons and pooled clients.

    Used for testing or when configuration changes.
    """
    for repository in _repository_instances.values():
        repository.close()
    _repository_instances.clear()
    reset_connections()
    logger.info("Repository singletons reset")
