"""
In-memory stand-ins for the pymongo client, database and collection.

Implements only the slice of the driver API the repositories call, with
the query operators the repositories emit ($and, $ne, $in, $lt and
friends) and $replaceWith update pipelines, so repository behavior can
be tested end to end without a server. Documents are deep-copied in and
out like a real round trip.
"""

import copy
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, WriteError

_MISSING = object()


def _compare(op: str, value: Any, operand: Any) -> bool:
    if op == "$eq":
        return value == operand
    if op == "$ne":
        return value is _MISSING or value != operand
    if op == "$in":
        return value is not _MISSING and value in operand
    if value is _MISSING or value is None:
        return False
    if op == "$lt":
        return value < operand
    if op == "$lte":
        return value <= operand
    if op == "$gt":
        return value > operand
    if op == "$gte":
        return value >= operand
    raise NotImplementedError(f"Operator {op} not supported by fake collection")


def matches(document: Dict[str, Any], filter: Dict[str, Any]) -> bool:
    """Whether a document satisfies a filter."""
    for key, condition in filter.items():
        if key == "$and":
            if not all(matches(document, sub) for sub in condition):
                return False
            continue

        value = document.get(key, _MISSING)
        if isinstance(condition, dict) and condition and all(k.startswith("$") for k in condition):
            if not all(_compare(op, value, operand) for op, operand in condition.items()):
                return False
        elif value is _MISSING or value != condition:
            return False
    return True


def _project(document: Dict[str, Any], projection: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    document = copy.deepcopy(document)
    if not projection:
        return document
    keep = {key for key, flag in projection.items() if flag} | {"_id"}
    return {key: value for key, value in document.items() if key in keep}


def _evaluate(expression: Any, document: Dict[str, Any]) -> Any:
    """Evaluate the aggregation expressions update pipelines use."""
    if isinstance(expression, str) and expression.startswith("$"):
        value = document.get(expression[1:], _MISSING)
        return value if value is _MISSING else copy.deepcopy(value)
    if not isinstance(expression, dict):
        return expression
    if "$literal" in expression:
        return copy.deepcopy(expression["$literal"])
    if "$mergeObjects" in expression:
        merged: Dict[str, Any] = {}
        for part in expression["$mergeObjects"]:
            merged.update(_evaluate(part, document))
        return merged
    if "$ifNull" in expression:
        *candidates, fallback = expression["$ifNull"]
        for candidate in candidates:
            value = _evaluate(candidate, document)
            if value is not _MISSING and value is not None:
                return value
        return _evaluate(fallback, document)
    # Expression object: missing values are left out
    evaluated = {key: _evaluate(value, document) for key, value in expression.items()}
    return {key: value for key, value in evaluated.items() if value is not _MISSING}


def _apply_pipeline(document: Dict[str, Any], pipeline: List[Dict[str, Any]]) -> None:
    for stage in pipeline:
        if set(stage) != {"$replaceWith"}:
            raise NotImplementedError(f"Stage {list(stage)} not supported by fake collection")
        replacement = _evaluate(stage["$replaceWith"], document)
        if "_id" in document and replacement.get("_id", document["_id"]) != document["_id"]:
            raise WriteError("Performing an update on the path '_id' would modify the immutable field '_id'")
        replacement.setdefault("_id", document.get("_id"))
        document.clear()
        document.update(replacement)


def _apply_update(document: Dict[str, Any], update: Any, inserting: bool) -> None:
    if isinstance(update, list):
        _apply_pipeline(document, update)
        return
    for key, value in update.get("$set", {}).items():
        document[key] = copy.deepcopy(value)
    if inserting:
        for key, value in update.get("$setOnInsert", {}).items():
            document[key] = copy.deepcopy(value)


class FakeCursor:
    """Cursor over a snapshot of matching documents."""

    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents
        self.limit_value: Optional[int] = None

    def limit(self, limit: int) -> "FakeCursor":
        self.limit_value = limit
        return self

    def _rows(self) -> List[Dict[str, Any]]:
        if self.limit_value:
            return self._documents[: self.limit_value]
        return list(self._documents)

    def __iter__(self):
        return iter(self._rows())


class FakeCollection:
    """Blocking collection keeping documents in insertion order."""

    def __init__(self, name: str):
        self.name = name
        self.documents: List[Dict[str, Any]] = []
        self.indexes: Dict[str, Any] = {}

    def _matching(self, filter: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [doc for doc in self.documents if matches(doc, filter or {})]

    def find(self, filter=None, projection=None) -> FakeCursor:
        return FakeCursor([_project(doc, projection) for doc in self._matching(filter)])

    def find_one(self, filter=None, projection=None) -> Optional[Dict[str, Any]]:
        found = self._matching(filter)
        return _project(found[0], projection) if found else None

    def count_documents(self, filter) -> int:
        return len(self._matching(filter))

    def insert_one(self, document: Dict[str, Any]):
        if any(doc.get("_id") == document.get("_id") for doc in self.documents):
            raise DuplicateKeyError(f"E11000 duplicate key error _id: {document.get('_id')}")
        self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=document.get("_id"), acknowledged=True)

    def insert_many(self, documents, ordered: bool = True):
        inserted_ids = [self.insert_one(document).inserted_id for document in documents]
        return SimpleNamespace(inserted_ids=inserted_ids, acknowledged=True)

    def find_one_and_update(
        self,
        filter,
        update,
        projection=None,
        upsert: bool = False,
        return_document=ReturnDocument.BEFORE,
    ):
        found = self._matching(filter)
        if not found:
            if not upsert:
                return None
            document = {
                key: value
                for key, value in filter.items()
                if not key.startswith("$") and not isinstance(value, dict)
            }
            _apply_update(document, update, inserting=True)
            self.documents.append(document)
            if return_document == ReturnDocument.BEFORE:
                return None
            return _project(document, projection)

        document = found[0]
        before = _project(document, projection)
        _apply_update(document, update, inserting=False)
        if return_document == ReturnDocument.BEFORE:
            return before
        return _project(document, projection)

    def _update(self, documents, update):
        modified = 0
        for document in documents:
            snapshot = copy.deepcopy(document)
            _apply_update(document, update, inserting=False)
            if document != snapshot:
                modified += 1
        return SimpleNamespace(
            matched_count=len(documents),
            modified_count=modified,
            upserted_id=None,
        )

    def update_one(self, filter, update):
        return self._update(self._matching(filter)[:1], update)

    def update_many(self, filter, update):
        return self._update(self._matching(filter), update)

    def _delete(self, documents):
        for document in documents:
            self.documents.remove(document)
        return SimpleNamespace(deleted_count=len(documents))

    def delete_one(self, filter):
        return self._delete(self._matching(filter)[:1])

    def delete_many(self, filter):
        return self._delete(self._matching(filter))

    def create_index(self, keys, name=None, **kwargs) -> str:
        self.indexes[name] = keys
        return name


class FakeDatabase:
    def __init__(self, name: str):
        self.name = name
        self.collections: Dict[str, FakeCollection] = {}
        self.created: List[str] = []

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection(name))

    def list_collection_names(self) -> List[str]:
        return list(self.created)

    def create_collection(self, name: str) -> FakeCollection:
        self.created.append(name)
        return self[name]


class FakeMongoClient:
    def __init__(self):
        self.databases: Dict[str, FakeDatabase] = {}
        self.closed = False

    def __getitem__(self, name: str) -> FakeDatabase:
        return self.databases.setdefault(name, FakeDatabase(name))

    def close(self) -> None:
        self.closed = True


# ===== Async twins =====


class AsyncFakeCursor(FakeCursor):
    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        rows = self._rows()
        return rows[:length] if length else rows


class AsyncFakeCollection:
    """Awaitable facade over a FakeCollection."""

    def __init__(self, collection: FakeCollection):
        self.sync = collection

    @property
    def documents(self) -> List[Dict[str, Any]]:
        return self.sync.documents

    def find(self, filter=None, projection=None) -> AsyncFakeCursor:
        return AsyncFakeCursor(list(self.sync.find(filter, projection)))

    async def find_one(self, filter=None, projection=None):
        return self.sync.find_one(filter, projection)

    async def count_documents(self, filter):
        return self.sync.count_documents(filter)

    async def insert_one(self, document):
        return self.sync.insert_one(document)

    async def insert_many(self, documents, ordered: bool = True):
        return self.sync.insert_many(documents, ordered=ordered)

    async def find_one_and_update(self, filter, update, **kwargs):
        return self.sync.find_one_and_update(filter, update, **kwargs)

    async def update_one(self, filter, update):
        return self.sync.update_one(filter, update)

    async def update_many(self, filter, update):
        return self.sync.update_many(filter, update)

    async def delete_one(self, filter):
        return self.sync.delete_one(filter)

    async def delete_many(self, filter):
        return self.sync.delete_many(filter)

    async def create_index(self, keys, name=None, **kwargs):
        return self.sync.create_index(keys, name=name, **kwargs)


class AsyncFakeDatabase:
    def __init__(self, name: str):
        self.sync = FakeDatabase(name)
        self.collections: Dict[str, AsyncFakeCollection] = {}

    def __getitem__(self, name: str) -> AsyncFakeCollection:
        if name not in self.collections:
            self.collections[name] = AsyncFakeCollection(self.sync[name])
        return self.collections[name]

    async def list_collection_names(self) -> List[str]:
        return self.sync.list_collection_names()

    async def create_collection(self, name: str) -> AsyncFakeCollection:
        self.sync.create_collection(name)
        return self[name]


class AsyncFakeMongoClient:
    def __init__(self):
        self.databases: Dict[str, AsyncFakeDatabase] = {}
        self.closed = False

    def __getitem__(self, name: str) -> AsyncFakeDatabase:
        return self.databases.setdefault(name, AsyncFakeDatabase(name))

    async def close(self) -> None:
        self.closed = True
