"""
State and helpers shared by the blocking and async repositories.

Holds the configuration binding, the configured guard, entity mapping
and the update documents both I/O modes send to the driver.
"""

from datetime import timedelta
from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from pymongo import ASCENDING

from .config import DbConfiguration
from .entity import CREATED_AT_FIELD, DELETED_FIELD, MODIFIED_AT_FIELD, MongoDbItem
from .errors import EntityNotFoundError, InvalidConfigurationError, NotConfiguredError, NullEntityError
from .base import WriteResult
from .lifecycle import prepare_for_update, replacement_fields, utcnow
from .logger import get_logger

TEntity = TypeVar("TEntity", bound=MongoDbItem)

# (name, keys) for ensure_indexes()
INDEXES: List[Tuple[str, List[Tuple[str, int]]]] = [
    ("deleted", [(DELETED_FIELD, ASCENDING)]),
    ("deleted_modifiedAt", [(DELETED_FIELD, ASCENDING), (MODIFIED_AT_FIELD, ASCENDING)]),
]

# Only createdAt is needed back from find_one_and_update
PRIOR_PROJECTION = {CREATED_AT_FIELD: 1}


class RepositoryCore(Generic[TEntity]):
    """
    Configuration binding and per-operation bookkeeping.

    Subclasses set entity_type (or pass it to the constructor) to choose
    the model documents are mapped to.
    """

    entity_type: Type[MongoDbItem] = MongoDbItem

    def __init__(self, entity_type: Optional[Type[TEntity]] = None):
        if entity_type is not None:
            self.entity_type = entity_type
        self._config: Optional[DbConfiguration] = None
        self._collection: Any = None
        self._log = get_logger(type(self).__module__)

    @property
    def configured(self) -> bool:
        return self._config is not None and self._collection is not None

    @property
    def config(self) -> Optional[DbConfiguration]:
        return self._config

    def close(self) -> None:
        """
        Release the configuration and collection references.

        The pooled client stays open for other repositories.
        """
        self._config = None
        self._collection = None
        self._log.bind(None)

    @staticmethod
    def _validated(config: Optional[DbConfiguration]) -> DbConfiguration:
        if config is None:
            raise InvalidConfigurationError("Configuration is required")
        config.validate()
        return config

    def _bind(self, config: DbConfiguration, collection: Any) -> None:
        self._config = config
        self._collection = collection
        self._log.bind(f"{config.db_name}.{config.collection}")
        self._log.info(
            f"Repository configured (auto_generate_ids={config.auto_generate_ids})"
        )

    def _check_is_configured(self) -> None:
        if not self.configured:
            raise NotConfiguredError()

    def _to_entity(self, document: Optional[Dict[str, Any]]) -> Optional[TEntity]:
        if document is None:
            return None
        return self.entity_type.from_document(document)

    @staticmethod
    def _check_max_rows(max_rows: int) -> None:
        if max_rows < 1:
            raise ValueError(f"max_rows must be at least 1, got {max_rows}")

    @staticmethod
    def _prepare_update(entity: Optional[TEntity]) -> TEntity:
        if entity is None:
            raise NullEntityError()
        if not entity.id:
            raise EntityNotFoundError(entity.id)
        return prepare_for_update(entity)

    @staticmethod
    def _update_document(entity: TEntity) -> List[Dict[str, Any]]:
        """
        Pipeline replacing the stored document with the entity.

        The stored createdAt survives; a document without one (including
        a fresh upsert) gets modifiedAt. Field values go through $literal
        so strings starting with "$" are not read as field paths.
        """
        return [
            {
                "$replaceWith": {
                    "$mergeObjects": [
                        {"$literal": replacement_fields(entity)},
                        {CREATED_AT_FIELD: {"$ifNull": [f"${CREATED_AT_FIELD}", entity.modified_at]}},
                    ]
                }
            }
        ]

    @staticmethod
    def _apply_prior(
        entity: TEntity,
        prior: Optional[Dict[str, Any]],
        upsert: bool,
    ) -> WriteResult:
        """
        Reconcile the entity with the document as it was before the write.

        prior is None when nothing matched: an error for update, a fresh
        document for upsert.
        """
        if prior is None:
            if not upsert:
                raise EntityNotFoundError(entity.id)
            entity.created_at = entity.modified_at
            return WriteResult(upserted_id=entity.id)

        if prior.get(CREATED_AT_FIELD) is not None:
            entity.created_at = prior[CREATED_AT_FIELD]
        else:
            entity.created_at = entity.modified_at
        return WriteResult(matched_count=1, modified_count=1)

    @staticmethod
    def _soft_delete_update() -> Dict[str, Any]:
        return {"$set": {DELETED_FIELD: True, MODIFIED_AT_FIELD: utcnow()}}

    @staticmethod
    def _cutoff(days: int):
        if days < 0:
            raise ValueError(f"days must not be negative, got {days}")
        return utcnow() - timedelta(days=days)
