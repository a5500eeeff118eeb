"""
Async MongoDB repository.

Non-blocking twin of MongoDbRepository built on pymongo's native asyncio
client. Same operations, same semantics; suspension happens only at
driver calls.
"""

from typing import Any, Dict, Iterable, List, Optional

from pymongo import ReturnDocument

from .base import MAX_NUMBER_OF_ROWS, AsyncRepositoryInterface, TEntity, WriteResult
from .config import DbConfiguration
from .connection import get_async_client
from .core import INDEXES, PRIOR_PROJECTION, RepositoryCore
from .entity import ID_FIELD
from .errors import EntityNotFoundError, NullEntityError
from .filters import by_id, by_ids, expired_soft_deletes, visible
from .lifecycle import prepare_for_insert, prepare_many_for_insert


class AsyncMongoDbRepository(RepositoryCore[TEntity], AsyncRepositoryInterface[TEntity]):
    """
    Async repository for one entity type stored in one MongoDB collection.

    Usage:
        class PersonRepository(AsyncMongoDbRepository[Person]):
            entity_type = Person

        repo = PersonRepository()
        await repo.configure(DbConfiguration("mongodb://localhost:27017", "people", "persons"))
        await repo.insert(Person(name="Ada"))
    """

    async def __aenter__(self) -> "AsyncMongoDbRepository[TEntity]":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()

    async def configure(self, config: DbConfiguration) -> None:
        config = self._validated(config)

        client = get_async_client(config.connection_string)
        database = client[config.db_name]
        if config.collection not in await database.list_collection_names():
            await database.create_collection(config.collection)
            self._log.info(f"Created collection {config.db_name}.{config.collection}")

        self._bind(config, database[config.collection])

    async def ensure_indexes(self) -> None:
        self._check_is_configured()
        for name, keys in INDEXES:
            await self._collection.create_index(keys, name=name)
        self._log.info(f"Ensured {len(INDEXES)} indexes")

    # ===== Reads =====

    async def all(
        self,
        max_rows: int = MAX_NUMBER_OF_ROWS,
        include_deleted: bool = False,
    ) -> List[TEntity]:
        return await self.query({}, max_rows=max_rows, include_deleted=include_deleted)

    async def query(
        self,
        filter: Dict[str, Any],
        max_rows: int = MAX_NUMBER_OF_ROWS,
        include_deleted: bool = False,
    ) -> List[TEntity]:
        self._check_is_configured()
        self._check_max_rows(max_rows)

        cursor = self._collection.find(visible(filter, include_deleted)).limit(max_rows)
        documents = await cursor.to_list()
        return [self._to_entity(document) for document in documents]

    async def get(self, entity_id: str, include_deleted: bool = False) -> Optional[TEntity]:
        self._check_is_configured()
        document = await self._collection.find_one(by_id(entity_id, include_deleted))
        return self._to_entity(document)

    async def count(
        self,
        filter: Optional[Dict[str, Any]] = None,
        include_deleted: bool = False,
    ) -> int:
        self._check_is_configured()
        return await self._collection.count_documents(visible(filter, include_deleted))

    async def any(
        self,
        filter: Optional[Dict[str, Any]] = None,
        include_deleted: bool = False,
    ) -> bool:
        self._check_is_configured()
        document = await self._collection.find_one(
            visible(filter, include_deleted), {ID_FIELD: 1}
        )
        return document is not None

    # ===== Writes =====

    async def insert(self, entity: TEntity) -> WriteResult:
        self._check_is_configured()
        prepare_for_insert(entity, self._config.auto_generate_ids)

        await self._collection.insert_one(entity.to_document())
        self._log.debug(f"Inserted {entity.id}")
        return WriteResult(inserted_ids=[entity.id])

    async def insert_many(self, entities: Iterable[TEntity]) -> WriteResult:
        self._check_is_configured()
        if entities is None:
            raise NullEntityError("Entities cannot be None.")

        prepared = prepare_many_for_insert(entities, self._config.auto_generate_ids)
        if not prepared:
            return WriteResult()

        await self._collection.insert_many([entity.to_document() for entity in prepared])
        self._log.debug(f"Inserted {len(prepared)} documents")
        return WriteResult(inserted_ids=[entity.id for entity in prepared])

    async def update(self, entity: TEntity) -> WriteResult:
        self._check_is_configured()
        self._prepare_update(entity)

        prior = await self._collection.find_one_and_update(
            by_id(entity.id),
            self._update_document(entity),
            projection=PRIOR_PROJECTION,
            return_document=ReturnDocument.BEFORE,
        )
        result = self._apply_prior(entity, prior, upsert=False)
        self._log.debug(f"Updated {entity.id}")
        return result

    async def upsert(self, entity: TEntity) -> WriteResult:
        self._check_is_configured()
        if entity is None:
            raise NullEntityError()
        if not entity.id:
            return await self.insert(entity)

        self._prepare_update(entity)
        prior = await self._collection.find_one_and_update(
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

    async def delete(self, entity_id: str, hard_delete: bool = False) -> WriteResult:
        self._check_is_configured()

        if hard_delete:
            result = await self._collection.delete_one(by_id(entity_id))
            self._log.debug(f"Hard deleted {entity_id} ({result.deleted_count})")
            return WriteResult(deleted_count=result.deleted_count)

        result = await self._collection.update_one(
            by_id(entity_id, include_deleted=False),
            self._soft_delete_update(),
        )
        self._log.debug(f"Soft deleted {entity_id} ({result.modified_count})")
        return WriteResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    async def delete_many(
        self, entity_ids: Iterable[str], hard_delete: bool = False
    ) -> WriteResult:
        self._check_is_configured()
        entity_ids = list(entity_ids or [])
        if not entity_ids:
            return WriteResult()

        if hard_delete:
            result = await self._collection.delete_many(by_ids(entity_ids))
            self._log.debug(f"Hard deleted {result.deleted_count} of {len(entity_ids)}")
            return WriteResult(deleted_count=result.deleted_count)

        result = await self._collection.update_many(
            by_ids(entity_ids, include_deleted=False),
            self._soft_delete_update(),
        )
        self._log.debug(f"Soft deleted {result.modified_count} of {len(entity_ids)}")
        return WriteResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    async def undelete(self, entity_id: str) -> Optional[TEntity]:
        self._check_is_configured()

        entity = await self.get(entity_id, include_deleted=True)
        if entity is None:
            return None

        entity.deleted = False
        try:
            await self.update(entity)
        except EntityNotFoundError:
            self._log.debug(f"Undelete of {entity_id} found nothing to restore")
            return None
        return entity

    async def clean_hard_deleted(self, days: int = 30) -> WriteResult:
        self._check_is_configured()
        cutoff = self._cutoff(days)

        result = await self._collection.delete_many(expired_soft_deletes(cutoff))
        self._log.info(
            f"Removed {result.deleted_count} documents soft-deleted before {cutoff.isoformat()}"
        )
        return WriteResult(deleted_count=result.deleted_count)
