"""
Email uniqueness enforcement for employee records.
"""
import logging
from typing import Optional

from staff_directory.core.errors import Conflict
from staff_directory.domains.employees.repository import EmployeeRepository

logger = logging.getLogger(__name__)


class UniquenessInvariantEnforcer:
    """
    Keeps employee emails unique across the collection.

    Two layers: reserve() is a pre-check that fails fast with a Conflict, and
    the unique index on employees.email rejects whatever slips through a
    concurrent check-then-write window. The repository translates that index
    violation into the same Conflict, so callers see one outcome either way.
    """

    def __init__(self, employee_repo: Optional[EmployeeRepository] = None):
        self.employee_repo = employee_repo or EmployeeRepository()

    async def reserve(self, email: str, exclude_id: Optional[str] = None) -> None:
        """
        Check that no other employee holds email.

        Args:
            email: Email to claim, compared case-insensitively
            exclude_id: Employee allowed to already hold it (the one being updated)

        Raises:
            Conflict: If a different employee already has the email
        """
        normalized = email.strip().lower()
        if await self.employee_repo.email_taken(normalized, exclude_id):
            logger.warning(f"Email conflict on {normalized}")
            raise Conflict("email", normalized)
