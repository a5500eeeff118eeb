"""
Soft-delete aware repository pattern for MongoDB.

Public API:
- MongoDbItem: Base model for stored entities
- DbConfiguration: Binding of a repository to a collection
- MongoDbRepository / AsyncMongoDbRepository: Blocking and async repositories
- create_repository / get_repository: Factories yielding configured repositories
- WriteResult: Result dataclass for write operations

Usage:
    from mongo_repository import DbConfiguration, MongoDbItem, MongoDbRepository

    class Person(MongoDbItem):
        name: str = ""

    class PersonRepository(MongoDbRepository[Person]):
        entity_type = Person

    repo = PersonRepository()
    repo.configure(DbConfiguration("mongodb://localhost:27017", "people", "persons"))
    repo.insert(Person(name="Ada"))
    repo.delete(person_id)      # soft delete
    repo.undelete(person_id)    # recover
"""

from .async_repository import AsyncMongoDbRepository
from .base import (
    MAX_NUMBER_OF_ROWS,
    AsyncRepositoryInterface,
    RepositoryInterface,
    WriteResult,
)
from .config import DbConfiguration
from .entity import MongoDbItem
from .errors import (
    EntityNotFoundError,
    InvalidConfigurationError,
    NotConfiguredError,
    NullEntityError,
    RepositoryError,
)
from .factory import (
    create_async_repository,
    create_repository,
    get_repository,
    reset_repositories,
)
from .repository import MongoDbRepository
from .version import __version__

__all__ = [
    # Entities and configuration
    "MongoDbItem",
    "DbConfiguration",
    # Repositories
    "MongoDbRepository",
    "AsyncMongoDbRepository",
    "RepositoryInterface",
    "AsyncRepositoryInterface",
    "WriteResult",
    "MAX_NUMBER_OF_ROWS",
    # Factories
    "create_repository",
    "create_async_repository",
    "get_repository",
    "reset_repositories",
    # Errors
    "RepositoryError",
    "NotConfiguredError",
    "InvalidConfigurationError",
    "NullEntityError",
    "EntityNotFoundError",
]
