"""
Employee repository for database operations.
"""
import logging
from typing import Any, Dict, Optional

from pymongo import ASCENDING

from staff_directory.db.base_repository import BaseRepository
from staff_directory.db.mongodb import storage_errors
from staff_directory.utils.id_handler import IdHandler

logger = logging.getLogger(__name__)

EMAIL_UNIQUE_INDEX = "email_unique"


class EmployeeRepository(BaseRepository):
    """
    Repository for employee data access.
    Extends BaseRepository with employee-specific operations.
    """

    collection_name = "employees"
    resource_name = "Employee"

    async def ensure_indexes(self) -> None:
        """
        Create the unique index on email.

        This index is the authoritative guard for email uniqueness; the
        pre-check in email_taken only produces a friendlier error earlier.
        """
        with storage_errors():
            await self.collection.create_index(
                [("email", ASCENDING)],
                unique=True,
                name=EMAIL_UNIQUE_INDEX
            )
        logger.info(f"Ensured index {EMAIL_UNIQUE_INDEX} on {self.collection_name}")

    async def email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        """
        Check whether another employee already uses this email.

        Args:
            email: Case-folded email
            exclude_id: Employee ID to ignore (the record being updated)

        Returns:
            True if a different employee has the email
        """
        query: Dict[str, Any] = {"email": email}
        exclude_obj_id = IdHandler.ensure_object_id(exclude_id)
        if exclude_obj_id is not None:
            query["_id"] = {"$ne": exclude_obj_id}
        return await self.exists(query)
