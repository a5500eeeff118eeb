"""
Entity contract for documents stored through a repository.

Every stored item carries an identifier, lifecycle timestamps and a
soft-delete flag. User entities subclass MongoDbItem and add fields:

    class Person(MongoDbItem):
        name: str = ""
        surname: str = ""
"""

from datetime import datetime
from typing import Any, Dict, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator

ID_FIELD = "_id"
CREATED_AT_FIELD = "createdAt"
MODIFIED_AT_FIELD = "modifiedAt"
DELETED_FIELD = "deleted"


class MongoDbItem(BaseModel):
    """
    Base model for repository entities.

    Attributes:
        id: Document identifier (stored as _id), None before insert
        created_at: Set once at first insert (stored as createdAt)
        modified_at: Refreshed on every write (stored as modifiedAt)
        deleted: Soft-delete marker
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = Field(default=None, alias=ID_FIELD)
    created_at: Optional[datetime] = Field(default=None, alias=CREATED_AT_FIELD)
    modified_at: Optional[datetime] = Field(default=None, alias=MODIFIED_AT_FIELD)
    deleted: bool = Field(default=False, alias=DELETED_FIELD)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_object_id(cls, value: Any) -> Any:
        # Documents written by other clients may carry server-assigned ObjectIds
        if isinstance(value, ObjectId):
            return str(value)
        return value

    def to_document(self) -> Dict[str, Any]:
        """Render the entity in its stored shape."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "MongoDbItem":
        """Build an entity from a stored document."""
        return cls.model_validate(document)
