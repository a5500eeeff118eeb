"""
Lifecycle stamping for repository entities.

Pure functions that prepare an entity for insert or update. Entities are
mutated in place and returned for chaining.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, TypeVar

from .entity import CREATED_AT_FIELD, MongoDbItem
from .errors import NullEntityError

TEntity = TypeVar("TEntity", bound=MongoDbItem)


def utcnow() -> datetime:
    """
    Current UTC time truncated to milliseconds.

    BSON dates hold millisecond precision; truncating keeps an in-memory
    entity equal to its stored copy.
    """
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def generate_id() -> str:
    """Return a 32-character uppercase hex id from a random 128-bit value."""
    return uuid.uuid4().hex.upper()


def prepare_for_insert(
    entity: Optional[TEntity],
    auto_generate_ids: bool,
    now: Optional[datetime] = None,
) -> TEntity:
    """
    Stamp an entity for first insert.

    Sets created_at and modified_at to now and clears deleted. With
    auto_generate_ids a fresh id overwrites the caller's; without it a
    fresh id is assigned only when the entity has none.

    Raises:
        NullEntityError: If entity is None
    """
    if entity is None:
        raise NullEntityError()

    now = now or utcnow()
    entity.created_at = now
    entity.modified_at = now
    entity.deleted = False

    if auto_generate_ids or not entity.id:
        entity.id = generate_id()

    return entity


def prepare_many_for_insert(
    entities: Iterable[Optional[TEntity]],
    auto_generate_ids: bool,
) -> List[TEntity]:
    """Stamp every entity of a batch with one shared timestamp."""
    now = utcnow()
    return [prepare_for_insert(entity, auto_generate_ids, now) for entity in entities]


def prepare_for_update(entity: Optional[TEntity], now: Optional[datetime] = None) -> TEntity:
    """
    Stamp an entity for update: refresh modified_at only.

    Raises:
        NullEntityError: If entity is None
    """
    if entity is None:
        raise NullEntityError()

    entity.modified_at = now or utcnow()
    return entity


def replacement_fields(entity: MongoDbItem) -> Dict[str, Any]:
    """
    Document that replaces the stored one on update.

    Everything the entity carries except createdAt, which only the insert
    path may write. Stored fields missing here are dropped.
    """
    document = entity.to_document()
    document.pop(CREATED_AT_FIELD, None)
    return document
