"""
Filter builders for soft-delete visibility and id matching.

Caller filters are opaque MongoDB filter documents; they are only ever
combined with the visibility predicate, never inspected.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from .entity import DELETED_FIELD, ID_FIELD, MODIFIED_AT_FIELD

# Documents written without the flag count as not deleted
NOT_DELETED: Dict[str, Any] = {DELETED_FIELD: {"$ne": True}}


def visible(
    filter: Optional[Dict[str, Any]] = None,
    include_deleted: bool = False,
) -> Dict[str, Any]:
    """
    Combine a caller filter with the soft-delete visibility rule.

    Args:
        filter: MongoDB query filter (None or {} matches everything)
        include_deleted: Include soft-deleted documents

    Returns:
        Filter document for the driver
    """
    filter = dict(filter or {})
    if include_deleted:
        return filter
    if not filter:
        return dict(NOT_DELETED)
    return {"$and": [filter, dict(NOT_DELETED)]}


def by_id(entity_id: str, include_deleted: bool = True) -> Dict[str, Any]:
    """Match a single document by id."""
    return visible({ID_FIELD: entity_id}, include_deleted)


def by_ids(entity_ids: Iterable[str], include_deleted: bool = True) -> Dict[str, Any]:
    """Match documents whose id is in entity_ids."""
    return visible({ID_FIELD: {"$in": list(entity_ids)}}, include_deleted)


def expired_soft_deletes(cutoff: datetime) -> Dict[str, Any]:
    """Match soft-deleted documents whose deletion is older than cutoff."""
    return {DELETED_FIELD: True, MODIFIED_AT_FIELD: {"$lt": cutoff}}
