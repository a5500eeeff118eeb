"""
Blocking MongoDB repository.

Wraps a pymongo collection with soft-delete aware reads and lifecycle
stamped writes.

Connection Management:
- Clients are pooled per connection string (see connection.py)
- configure() binds one collection; re-configuring rebinds it
- close() releases references only

Error Handling:
- Fail-fast: driver errors propagate to the caller unchanged
- Nothing is retried
"""

from typing import Any, Dict, Iterable, List, Optional

from pymongo import ReturnDocument

from .base import MAX_NUMBER_OF_ROWS, RepositoryInterface, TEntity, WriteResult
from .config import DbConfiguration
from .connection import get_client
from .core import INDEXES, PRIOR_PROJECTION, RepositoryCore
from .entity import ID_FIELD
from .errors import EntityNotFoundError, NullEntityError
from .filters import by_id, by_ids, expired_soft_deletes, visible
from .lifecycle import prepare_for_insert, prepare_many_for_insert


class MongoDbRepository(RepositoryCore[TEntity], RepositoryInterface[TEntity]):
    """
    Repository for one entity type stored in one MongoDB collection.

    Usage:
        class PersonRepository(MongoDbRepository[Person]):
            entity_type = Person

        repo = PersonRepository()
        repo.configure(DbConfiguration("mongodb://localhost:27017", "people", "persons"))
        repo.insert(Person(name="Ada"))
    """

    def __enter__(self) -> "MongoDbRepository[TEntity]":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def configure(self, config: DbConfiguration) -> None:
        config = self._validated(config)

        client = get_client(config.connection_string)
        database = client[config.db_name]
        if config.collection not in database.list_collection_names():
            database.create_collection(config.collection)
            self._log.info(f"Created collection {config.db_name}.{config.collection}")

        self._bind(config, database[config.collection])

    def ensure_indexes(self) -> None:
        """Create the indexes the visibility filter and retention sweep use."""
        self._check_is_configured()
        for name, keys in INDEXES:
            self._collection.create_index(keys, name=name)
        self._log.info(f"Ensured {len(INDEXES)} indexes")

    # ===== Reads =====

    def all(
        self,
        max_rows: int = MAX_NUMBER_OF_ROWS,
        include_deleted: bool = False,
    ) -> List[TEntity]:
        return self.query({}, max_rows=max_rows, include_deleted=include_deleted)

    def query(
        self,
        filter: Dict[str, Any],
        max_rows: int = MAX_NUMBER_OF_ROWS,
        include_deleted: bool = False,
    ) -> List[TEntity]:
        self._check_is_configured()
        self._check_max_rows(max_rows)

        cursor = self._collection.find(visible(filter, include_deleted)).limit(max_rows)
        return [self._to_entity(document) for document in cursor]

    def get(self, entity_id: str, include_deleted: bool = False) -> Optional[TEntity]:
        self._check_is_configured()
        return self._to_entity(self._collection.find_one(by_id(entity_id, include_deleted)))

    def count(
        self,
        filter: Optional[Dict[str, Any]] = None,
        include_deleted: bool = False,
    ) -> int:
        self._check_is_configured()
        return self._collection.count_documents(visible(filter, include_deleted))

    def any(
        self,
        filter: Optional[Dict[str, Any]] = None,
        include_deleted: bool = False,
    ) -> bool:
        self._check_is_configured()
        document = self._collection.find_one(visible(filter, include_deleted), {ID_FIELD: 1})
        return document is not None

    # ===== Writes =====

    def insert(self, entity: TEntity) -> WriteResult:
        self._check_is_configured()
        prepare_for_insert(entity, self._config.auto_generate_ids)

        self._collection.insert_one(entity.to_document())
        self._log.debug(f"Inserted {entity.id}")
        return WriteResult(inserted_ids=[entity.id])

    def insert_many(self, entities: Iterable[TEntity]) -> WriteResult:
        self._check_is_configured()
        if entities is None:
            raise NullEntityError("Entities cannot be None.")

        prepared = prepare_many_for_insert(entities, self._config.auto_generate_ids)
        if not prepared:
            return WriteResult()

        self._collection.insert_many([entity.to_document() for entity in prepared])
        self._log.debug(f"Inserted {len(prepared)} documents")
        return WriteResult(inserted_ids=[entity.id for entity in prepared])

    def update(self, entity: TEntity) -> WriteResult:
        self._check_is_configured()
        self._prepare_update(entity)

        prior = self._collection.find_one_and_update(
            by_id(entity.id),
            self._update_document(entity),
            projection=PRIOR_PROJECTION,
            return_document=ReturnDocument.BEFORE,
        )
        result = self._apply_prior(entity, prior, upsert=False)
        self._log.debug(f"Updated {entity.id}")
        return result

    def upsert(self, entity: TEntity) -> WriteResult:
        self._check_is_configured()
        if entity is None:
            raise NullEntityError()
        if not entity.id:
            return self.insert(entity)

        self._prepare_update(entity)
        prior = self._collection.find_one_and_update(
            by_id(entity.id),
            self._update_document(entity),
            projection=PRIOR_PROJECTION,
            upsert=True,
            return_document=ReturnDocument.BEFORE,
        )
        result = self._apply_prior(entity, prior, upsert=True)
        self._log.debug(f"Upserted {entity.id} (created={result.upserted_id is not None})")
        return result

    # ===== Delete / undelete =====

    def delete(self, entity_id: str, hard_delete: bool = False) -> WriteResult:
        self._check_is_configured()

        if hard_delete:
            result = self._collection.delete_one(by_id(entity_id))
            self._log.debug(f"Hard deleted {entity_id} ({result.deleted_count})")
            return WriteResult(deleted_count=result.deleted_count)

        # Already soft-deleted documents keep their original deletion time
        result = self._collection.update_one(
            by_id(entity_id, include_deleted=False),
            self._soft_delete_update(),
        )
        self._log.debug(f"Soft deleted {entity_id} ({result.modified_count})")
        return WriteResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    def delete_many(self, entity_ids: Iterable[str], hard_delete: bool = False) -> WriteResult:
        self._check_is_configured()
        entity_ids = list(entity_ids or [])
        if not entity_ids:
            return WriteResult()

        if hard_delete:
            result = self._collection.delete_many(by_ids(entity_ids))
            self._log.debug(f"Hard deleted {result.deleted_count} of {len(entity_ids)}")
            return WriteResult(deleted_count=result.deleted_count)

        result = self._collection.update_many(
            by_ids(entity_ids, include_deleted=False),
            self._soft_delete_update(),
        )
        self._log.debug(f"Soft deleted {result.modified_count} of {len(entity_ids)}")
        return WriteResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    def undelete(self, entity_id: str) -> Optional[TEntity]:
        self._check_is_configured()

        entity = self.get(entity_id, include_deleted=True)
        if entity is None:
            return None

        entity.deleted = False
        try:
            self.update(entity)
        except EntityNotFoundError:
            # Hard deleted between the read and the write
            self._log.debug(f"Undelete of {entity_id} found nothing to restore")
            return None
        return entity

    def clean_hard_deleted(self, days: int = 30) -> WriteResult:
        self._check_is_configured()
        cutoff = self._cutoff(days)

        result = self._collection.delete_many(expired_soft_deletes(cutoff))
        self._log.info(
            f"Removed {result.deleted_count} documents soft-deleted before {cutoff.isoformat()}"
        )
        return WriteResult(deleted_count=result.deleted_count)
