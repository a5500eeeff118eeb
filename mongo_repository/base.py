"""
Repository Interface Definitions

Defines the abstract interface for entity repository operations, in a
blocking and a non-blocking form with identical semantics. Consumers
depend on these interfaces; MongoDbRepository and AsyncMongoDbRepository
implement them over pymongo.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar

from .config import DbConfiguration
from .entity import MongoDbItem

TEntity = TypeVar("TEntity", bound=MongoDbItem)

# Upper bound on rows materialized by all()/query()
MAX_NUMBER_OF_ROWS = 100000


@dataclass
class WriteResult:
    """
    Result of a write operation.

    Attributes:
        matched_count: Number of documents that matched the filter
        modified_count: Number of documents actually modified
        deleted_count: Number of documents permanently removed
        upserted_id: ID of a document created by upsert (if any)
        inserted_ids: IDs of inserted documents
    """
    matched_count: int = 0
    modified_count: int = 0
    deleted_count: int = 0
    upserted_id: Optional[str] = None
    inserted_ids: List[str] = field(default_factory=list)


class RepositoryInterface(ABC, Generic[TEntity]):
    """
    Abstract interface for a soft-delete aware entity repository.

    All reads hide soft-deleted entities unless include_deleted is set.
    All writes stamp lifecycle metadata on the entity passed in.
    Every operation except configure() raises NotConfiguredError until
    configure() has succeeded.
    """

    @property
    @abstractmethod
    def configured(self) -> bool:
        """Whether a configuration and collection are bound."""
        pass

    @abstractmethod
    def configure(self, config: DbConfiguration) -> None:
        """
        Bind the repository to a collection, creating it if absent.

        Args:
            config: Connection target, database, collection and id policy

        Raises:
            InvalidConfigurationError: If config is None or incomplete
        """
        pass

    @abstractmethod
    def all(
        self,
        max_rows: int = MAX_NUMBER_OF_ROWS,
        include_deleted: bool = False,
    ) -> List[TEntity]:
        """
        Return every visible entity, up to max_rows.

        Args:
            max_rows: Maximum entities to return
            include_deleted: Include soft-deleted entities

        Returns:
            List of entities in driver-defined order
        """
        pass

    @abstractmethod
    def query(
        self,
        filter: Dict[str, Any],
        max_rows: int = MAX_NUMBER_OF_ROWS,
        include_deleted: bool = False,
    ) -> List[TEntity]:
        """
        Return visible entities matching a filter, up to max_rows.

        Args:
            filter: MongoDB query filter
            max_rows: Maximum entities to return
            include_deleted: Include soft-deleted entities

        Returns:
            List of matching entities
        """
        pass

    @abstractmethod
    def get(self, entity_id: str, include_deleted: bool = False) -> Optional[TEntity]:
        """
        Get a single entity by id.

        Returns:
            The entity, or None if not found (or soft-deleted and hidden)
        """
        pass

    @abstractmethod
    def count(
        self,
        filter: Optional[Dict[str, Any]] = None,
        include_deleted: bool = False,
    ) -> int:
        """Count visible entities, optionally filtered."""
        pass

    @abstractmethod
    def any(
        self,
        filter: Optional[Dict[str, Any]] = None,
        include_deleted: bool = False,
    ) -> bool:
        """Whether at least one visible entity matches."""
        pass

    @abstractmethod
    def insert(self, entity: TEntity) -> WriteResult:
        """
        Insert an entity after stamping id, timestamps and deleted flag.

        Raises:
            NullEntityError: If entity is None
        """
        pass

    @abstractmethod
    def insert_many(self, entities: Iterable[TEntity]) -> WriteResult:
        """Insert several entities with one bulk driver call."""
        pass

    @abstractmethod
    def update(self, entity: TEntity) -> WriteResult:
        """
        Replace the stored document with the entity, preserving its createdAt.

        Raises:
            NullEntityError: If entity is None
            EntityNotFoundError: If no document has the entity's id
        """
        pass

    @abstractmethod
    def upsert(self, entity: TEntity) -> WriteResult:
        """
        Insert the entity if its id is unknown, update it otherwise.

        Raises:
            NullEntityError: If entity is None
        """
        pass

    @abstractmethod
    def delete(self, entity_id: str, hard_delete: bool = False) -> WriteResult:
        """
        Delete the entity with the given id.

        Args:
            entity_id: Entity id
            hard_delete: Permanently remove instead of marking deleted
        """
        pass

    @abstractmethod
    def delete_many(self, entity_ids: Iterable[str], hard_delete: bool = False) -> WriteResult:
        """Delete the given ids; unknown ids are skipped."""
        pass

    @abstractmethod
    def undelete(self, entity_id: str) -> Optional[TEntity]:
        """
        Recover a soft-deleted entity.

        Returns:
            The restored entity, or None if no document has that id
        """
        pass

    @abstractmethod
    def clean_hard_deleted(self, days: int = 30) -> WriteResult:
        """
        Permanently remove entities soft-deleted more than days ago.

        Returns:
            WriteResult with deleted_count
        """
        pass


class AsyncRepositoryInterface(ABC, Generic[TEntity]):
    """
    Non-blocking twin of RepositoryInterface.

    Same operations, same semantics; every method is a coroutine.
    """

    @property
    @abstractmethod
    def configured(self) -> bool:
        pass

    @abstractmethod
    async def configure(self, config: DbConfiguration) -> None:
        pass

    @abstractmethod
    async def all(
        self,
        max_rows: int = MAX_NUMBER_OF_ROWS,
        include_deleted: bool = False,
    ) -> List[TEntity]:
        pass

    @abstractmethod
    async def query(
        self,
        filter: Dict[str, Any],
        max_rows: int = MAX_NUMBER_OF_ROWS,
        include_deleted: bool = False,
    ) -> List[TEntity]:
        pass

    @abstractmethod
    async def get(self, entity_id: str, include_deleted: bool = False) -> Optional[TEntity]:
        pass

    @abstractmethod
    async def count(
        self,
        filter: Optional[Dict[str, Any]] = None,
        include_deleted: bool = False,
    ) -> int:
        pass

    @abstractmethod
    async def any(
        self,
        filter: Optional[Dict[str, Any]] = None,
        include_deleted: bool = False,
    ) -> bool:
        pass

    @abstractmethod
    async def insert(self, entity: TEntity) -> WriteResult:
        pass

    @abstractmethod
    async def insert_many(self, entities: Iterable[TEntity]) -> WriteResult:
        pass

    @abstractmethod
    async def update(self, entity: TEntity) -> WriteResult:
        pass

    @abstractmethod
    async def upsert(self, entity: TEntity) -> WriteResult:
        pass

    @abstractmethod
    async def delete(self, entity_id: str, hard_delete: bool = False) -> WriteResult:
        pass

    @abstractmethod
    async def delete_many(
        self, entity_ids: Iterable[str], hard_delete: bool = False
    ) -> WriteResult:
        pass

    @abstractmethod
    async def undelete(self, entity_id: str) -> Optional[TEntity]:
        pass

    @abstractmethod
    async def clean_hard_deleted(self, days: int = 30) -> WriteResult:
        pass
