"""
Base repository pattern implementation for MongoDB collections.
"""
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pymongo import ReturnDocument
from pymongo.collation import Collation
from pymongo.errors import DuplicateKeyError

from staff_directory.core.errors import Conflict
from staff_directory.db.mongodb import get_collection, storage_errors
from staff_directory.utils.datetime_handler import DateTimeHandler
from staff_directory.utils.id_handler import IdHandler


def conflict_from_duplicate_key(error: DuplicateKeyError, resource: str) -> Conflict:
    """
    Translate a unique index violation into the domain Conflict.

    The server reports the offending key in details["keyValue"], e.g.
    {"email": "ada@x.com"}.
    """
    key_value = (error.details or {}).get("keyValue") or {}
    if key_value:
        field, value = next(iter(key_value.items()))
    else:
        field, value = "key", None
    return Conflict(field, value, resource)


class BaseRepository:
    """
    Base repository class that implements standard CRUD operations for MongoDB collections.
    Handles ID conversions, timestamps, unique index violations and storage failures.
    """

    collection_name: str = ""
    resource_name: str = "Document"

    def __init__(self, collection=None):
        """
        Initialize repository.

        Args:
            collection: Optional Motor AsyncIOMotorCollection; resolved by
                collection_name on first use when omitted
        """
        self._collection = collection

    @property
    def collection(self):
        if self._collection is None:
            self._collection = get_collection(self.collection_name)
        return self._collection

    async def find_by_id(self, id_value: Any) -> Optional[Dict[str, Any]]:
        """
        Find a document by ID.

        Args:
            id_value: ID to look for (string or ObjectId)

        Returns:
            Document dict with formatted IDs or None if not found or not a valid ID
        """
        obj_id = IdHandler.ensure_object_id(id_value)
        if obj_id is None:
            return None
        return await self.find_one({"_id": obj_id})

    async def find_one(self, query: Dict[str, Any], projection: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """
        Find a single document matching query.

        Args:
            query: MongoDB query dictionary
            projection: Optional field projection

        Returns:
            Document dict with formatted IDs or None if not found
        """
        with storage_errors():
            document = await self.collection.find_one(query, projection)
        return IdHandler.format_object_ids(document) if document else None

    async def find_many(self,
                        query: Optional[Dict[str, Any]] = None,
                        skip: int = 0,
                        limit: int = 100,
                        sort: Optional[Sequence[Tuple[str, int]]] = None,
                        collation: Optional[Collation] = None,
                        projection: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Find documents matching query with pagination.

        Sorting is applied by the server before skip/limit.

        Args:
            query: MongoDB query dictionary
            skip: Number of documents to skip
            limit: Maximum number of documents to return
            sort: List of (field, direction) pairs
            collation: Optional collation for string comparison
            projection: Optional field projection

        Returns:
            List of documents with formatted IDs
        """
        if query is None:
            query = {}

        cursor = self.collection.find(query, projection, collation=collation)
        if sort:
            cursor = cursor.sort(list(sort))
        cursor = cursor.skip(skip).limit(limit)

        with storage_errors():
            documents = await cursor.to_list(length=limit)
        return IdHandler.format_object_ids(documents)

    async def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        """
        Count documents matching query.

        Args:
            query: MongoDB query dictionary

        Returns:
            Count of matching documents
        """
        if query is None:
            query = {}
        with storage_errors():
            return await self.collection.count_documents(query)

    async def exists(self, query: Dict[str, Any]) -> bool:
        """Return True if at least one document matches query."""
        with storage_errors():
            document = await self.collection.find_one(query, {"_id": 1})
        return document is not None

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a new document.

        Args:
            data: Document data

        Returns:
            Created document with formatted IDs

        Raises:
            Conflict: If the insert violates a unique index
        """
        now = DateTimeHandler.get_current_datetime()
        document = dict(data)
        document.setdefault("created_at", now)
        document.setdefault("updated_at", now)

        try:
            with storage_errors():
                result = await self.collection.insert_one(document)
        except DuplicateKeyError as e:
            raise conflict_from_duplicate_key(e, self.resource_name) from e

        document["_id"] = result.inserted_id
        return IdHandler.format_object_ids(document)

    async def update(self, id_value: Any, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Update a document by ID in a single atomic write.

        Args:
            id_value: ID of document to update
            data: New field values

        Returns:
            Updated document with formatted IDs or None if not found

        Raises:
            Conflict: If the update violates a unique index
        """
        obj_id = IdHandler.ensure_object_id(id_value)
        if obj_id is None:
            return None

        update_data = {k: v for k, v in data.items() if k != "_id"}
        update_data["updated_at"] = DateTimeHandler.get_current_datetime()

        try:
            with storage_errors():
                document = await self.collection.find_one_and_update(
                    {"_id": obj_id},
                    {"$set": update_data},
                    return_document=ReturnDocument.AFTER
                )
        except DuplicateKeyError as e:
            raise conflict_from_duplicate_key(e, self.resource_name) from e

        return IdHandler.format_object_ids(document) if document else None

    async def delete(self, id_value: Any) -> bool:
        """
        Delete a document by ID.

        Args:
            id_value: ID of document to delete

        Returns:
            True if document was deleted, False if not found
        """
        obj_id = IdHandler.ensure_object_id(id_value)
        if obj_id is None:
            return False

        with storage_errors():
            result = await self.collection.delete_one({"_id": obj_id})
        return result.deleted_count > 0
