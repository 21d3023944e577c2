"""
Shared MongoDB repository behaviour.

Documents are stored with an ``ObjectId`` under ``_id``.  Records
leaving a repository are plain dictionaries whose ``_id`` has been
renamed to a string ``id``; callers never see ``ObjectId`` values.
Identifiers that are not valid ObjectIds are treated as unknown
records rather than errors.
"""

from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..core.errors import DuplicateRecordError


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Return ``value`` as an ``ObjectId`` or ``None`` when it is not one."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def from_document(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Convert a stored document into the record shape used by services."""
    if document is None:
        return None
    record = dict(document)
    record["id"] = str(record.pop("_id"))
    return record


def to_document(record: Dict[str, Any]) -> Dict[str, Any]:
    """Strip identifier keys from a record before it is written."""
    return {key: value for key, value in record.items() if key not in ("id", "_id")}


class MongoRepository:
    """CRUD operations over a single collection."""

    unique_fields: Tuple[str, ...] = ()

    def __init__(self, collection: AsyncIOMotorCollection) -> None:
        self.collection = collection

    async def ensure_indexes(self) -> None:
        for field in self.unique_fields:
            await self.collection.create_index(field, unique=True)

    async def get_all(self) -> List[Dict[str, Any]]:
        return [from_document(document) async for document in self.collection.find()]

    async def get_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        object_id = to_object_id(record_id)
        if object_id is None:
            return None
        return from_document(await self.collection.find_one({"_id": object_id}))

    async def find_one(self, **filters: Any) -> Optional[Dict[str, Any]]:
        return from_document(await self.collection.find_one(filters))

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        document = to_document(data)
        try:
            result = await self.collection.insert_one(document)
        except DuplicateKeyError as exc:
            raise DuplicateRecordError(self._duplicate_field(exc)) from exc
        document["_id"] = result.inserted_id
        return from_document(document)

    async def update(self, record_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply ``changes`` with ``$set`` and return the updated record."""
        object_id = to_object_id(record_id)
        if object_id is None:
            return None
        try:
            document = await self.collection.find_one_and_update(
                {"_id": object_id},
                {"$set": to_document(changes)},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as exc:
            raise DuplicateRecordError(self._duplicate_field(exc)) from exc
        return from_document(document)

    async def delete(self, record_id: str) -> bool:
        object_id = to_object_id(record_id)
        if object_id is None:
            return False
        result = await self.collection.delete_one({"_id": object_id})
        return result.deleted_count == 1

    def _duplicate_field(self, exc: DuplicateKeyError) -> str:
        key_pattern = (exc.details or {}).get("keyPattern") or {}
        if key_pattern:
            return next(iter(key_pattern))
        return self.unique_fields[0] if self.unique_fields else "_id"
