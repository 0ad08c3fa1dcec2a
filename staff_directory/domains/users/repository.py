"""
User repository for database operations.
"""
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING

from staff_directory.db.base_repository import BaseRepository
from staff_directory.db.mongodb import storage_errors
from staff_directory.utils.id_handler import IdHandler


class UserRepository(BaseRepository):
    """
    Repository for user data access.
    Extends BaseRepository with user-specific operations.
    """

    collection_name = "users"
    resource_name = "User"

    async def ensure_indexes(self) -> None:
        """Create the unique index on user email."""
        with storage_errors():
            await self.collection.create_index([("email", ASCENDING)], unique=True, name="email_unique")

    async def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """
        Find a user by email.

        Args:
            email: User email, compared lower-cased

        Returns:
            User document or None if not found
        """
        return await self.find_one({"email": email.strip().lower()})

    async def find_display_identities(self, user_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        """
        Look up the public identity of several users at once.

        Args:
            user_ids: User IDs as strings

        Returns:
            Mapping of user ID to {"_id", "name", "email"}; unknown IDs are absent
        """
        obj_ids = [IdHandler.ensure_object_id(user_id) for user_id in user_ids]
        obj_ids = [obj_id for obj_id in obj_ids if obj_id is not None]
        if not obj_ids:
            return {}

        users = await self.find_many(
            {"_id": {"$in": obj_ids}},
            limit=len(obj_ids),
            projection={"name": 1, "email": 1}
        )
        return {
            user["_id"]: {"_id": user["_id"], "name": user.get("name"), "email": user.get("email")}
            for user in users
        }
