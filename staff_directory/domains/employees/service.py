"""
Employee service for business logic.
"""
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from staff_directory.core.errors import NotFound, ValidationFailed
from staff_directory.core.permissions import (
    ADMIN_ONLY,
    ANY_AUTHENTICATED,
    AuthorizationGate,
    Principal,
    authorization_gate,
)
from staff_directory.domains.employees.query import DirectoryQueryEngine, Page, QueryParams
from staff_directory.domains.employees.repository import EmployeeRepository
from staff_directory.domains.employees.uniqueness import UniquenessInvariantEnforcer
from staff_directory.schemas.employee import EmployeeCreate
from staff_directory.utils.id_handler import IdHandler

logger = logging.getLogger(__name__)


def validate_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate and normalize the mutable employee fields.

    Raises:
        ValidationFailed: With one entry per offending field
    """
    try:
        return EmployeeCreate.model_validate(fields).model_dump()
    except ValidationError as e:
        raise ValidationFailed.from_pydantic(e.errors()) from e


class EmployeeService:
    """
    Service for employee reads and mutations.

    Every operation passes the authorization gate before touching storage.
    Mutations each issue a single-document write, so a failed call leaves
    no partial change behind. Nothing here retries; a storage timeout
    reaches the caller as a retryable error.
    """

    def __init__(
            self,
            employee_repo: Optional[EmployeeRepository] = None,
            uniqueness: Optional[UniquenessInvariantEnforcer] = None,
            query_engine: Optional[DirectoryQueryEngine] = None,
            gate: Optional[AuthorizationGate] = None
    ):
        """
        Initialize with collaborators.

        Args:
            employee_repo: Optional employee repository instance
            uniqueness: Optional email uniqueness enforcer
            query_engine: Optional directory query engine
            gate: Optional authorization gate
        """
        self.employee_repo = employee_repo or EmployeeRepository()
        self.uniqueness = uniqueness or UniquenessInvariantEnforcer(self.employee_repo)
        self.query_engine = query_engine or DirectoryQueryEngine(self.employee_repo)
        self.gate = gate or authorization_gate

    async def list_employees(self, params: QueryParams, principal: Optional[Principal]) -> Page:
        """
        Get one page of employees.

        Args:
            params: Search, sort and pagination parameters
            principal: Caller

        Returns:
            Page of employees
        """
        self.gate.authorize(principal, ANY_AUTHENTICATED)
        return await self.query_engine.query(params)

    async def get_employee(self, employee_id: str, principal: Optional[Principal]) -> Dict[str, Any]:
        """
        Get employee by ID.

        Raises:
            NotFound: If no employee has this ID
        """
        self.gate.authorize(principal, ANY_AUTHENTICATED)
        employee = await self._load(employee_id)
        return await self._with_creator(employee)

    async def create_employee(self, fields: Dict[str, Any], principal: Optional[Principal]) -> Dict[str, Any]:
        """
        Create a new employee owned by the calling principal.

        Args:
            fields: name, email, phone, designation and salary
            principal: Caller; becomes created_by

        Returns:
            Created employee document

        Raises:
            Unauthenticated: If there is no principal
            ValidationFailed: If any field is invalid
            Conflict: If another employee already has the email
        """
        principal = self.gate.authorize(principal, ANY_AUTHENTICATED)
        data = validate_fields(fields)

        await self.uniqueness.reserve(data["email"])

        data["created_by"] = IdHandler.ensure_object_id(principal.identity) or principal.identity
        # A concurrent create with the same email that passed the pre-check
        # is rejected by the unique index and raised as Conflict here
        created = await self.employee_repo.create(data)

        logger.info(f"Employee {created['_id']} created by {principal.identity}")
        return await self._with_creator(created)

    async def update_employee(
            self,
            employee_id: str,
            fields: Dict[str, Any],
            principal: Optional[Principal]
    ) -> Dict[str, Any]:
        """
        Replace the mutable fields of an existing employee.

        id and created_by never change.

        Raises:
            Unauthenticated: If there is no principal
            ValidationFailed: If any field is invalid
            NotFound: If the employee does not exist (or vanished mid-update)
            Conflict: If another employee already has the new email
        """
        principal = self.gate.authorize(principal, ANY_AUTHENTICATED)
        data = validate_fields(fields)

        existing = await self._load(employee_id)
        if data["email"] != existing.get("email"):
            await self.uniqueness.reserve(data["email"], exclude_id=employee_id)

        updated = await self.employee_repo.update(employee_id, data)
        if not updated:
            raise NotFound("Employee", employee_id)

        logger.info(f"Employee {employee_id} updated by {principal.identity}")
        return await self._with_creator(updated)

    async def delete_employee(self, employee_id: str, principal: Optional[Principal]) -> None:
        """
        Permanently delete an employee. Admin only.

        Raises:
            Unauthenticated: If there is no principal
            Forbidden: If the principal is not an admin
            NotFound: If the employee does not exist
        """
        principal = self.gate.authorize(principal, ADMIN_ONLY)

        await self._load(employee_id)
        if not await self.employee_repo.delete(employee_id):
            raise NotFound("Employee", employee_id)

        logger.info(f"Employee {employee_id} deleted by {principal.identity}")

    async def _load(self, employee_id: str) -> Dict[str, Any]:
        employee = await self.employee_repo.find_by_id(employee_id)
        if not employee:
            raise NotFound("Employee", employee_id)
        return employee

    async def _with_creator(self, employee: Dict[str, Any]) -> Dict[str, Any]:
        resolved = await self.query_engine.resolve_creators([employee])
        return resolved[0]


# Create global instance
employee_service = EmployeeService()
