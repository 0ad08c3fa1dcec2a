"""
Employee API routes for directory management.
"""
from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Query, status

from staff_directory.core.config import settings
from staff_directory.core.permissions import Principal
from staff_directory.dependencies.auth import get_current_principal
from staff_directory.domains.employees.query import QueryParams, SortDirection, SortKey
from staff_directory.domains.employees.service import employee_service
from staff_directory.schemas.employee import DeleteEnvelope, EmployeeEnvelope, EmployeeListEnvelope

router = APIRouter()

# Bodies are accepted as plain objects so that the authorization gate runs
# before field validation; the service validates against EmployeeCreate.
EMPLOYEE_BODY = Body(
    ...,
    examples=[{
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "phone": "1234567890",
        "designation": "Engineer",
        "salary": 1000
    }]
)


@router.get("", response_model=EmployeeListEnvelope)
async def get_employees(
    search: Optional[str] = None,
    page: int = 1,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    sort: SortKey = SortKey.CREATED_AT,
    order: SortDirection = SortDirection.DESC,
    principal: Optional[Principal] = Depends(get_current_principal)
):
    """
    Get employees with search, sorting and pagination.

    Args:
        search: Case-insensitive substring of name, email or designation
        page: 1-based page number
        limit: Page size
        sort: Sort key
        order: asc or desc
        principal: Current caller

    Returns:
        Page of employees with pagination metadata
    """
    params = QueryParams(search=search, sort_key=sort, sort_direction=order, page=page, page_size=limit)
    result = await employee_service.list_employees(params, principal)
    return {"success": True, "data": result.data, "pagination": result.pagination}


@router.get("/{employee_id}", response_model=EmployeeEnvelope)
async def get_employee(
    employee_id: str,
    principal: Optional[Principal] = Depends(get_current_principal)
):
    """
    Get employee by ID.
    """
    employee = await employee_service.get_employee(employee_id, principal)
    return {"success": True, "data": employee}


@router.post("", response_model=EmployeeEnvelope, status_code=status.HTTP_201_CREATED)
async def create_employee(
    employee_data: Dict[str, Any] = EMPLOYEE_BODY,
    principal: Optional[Principal] = Depends(get_current_principal)
):
    """
    Create new employee.

    Args:
        employee_data: name, email, phone, designation, salary
        principal: Current caller

    Returns:
        Created employee
    """
    employee = await employee_service.create_employee(employee_data, principal)
    return {"success": True, "message": "Employee created successfully", "data": employee}


@router.put("/{employee_id}", response_model=EmployeeEnvelope)
async def update_employee(
    employee_id: str,
    employee_data: Dict[str, Any] = EMPLOYEE_BODY,
    principal: Optional[Principal] = Depends(get_current_principal)
):
    """
    Update existing employee. All mutable fields are required.
    """
    employee = await employee_service.update_employee(employee_id, employee_data, principal)
    return {"success": True, "message": "Employee updated successfully", "data": employee}


@router.delete("/{employee_id}", response_model=DeleteEnvelope)
async def delete_employee(
    employee_id: str,
    principal: Optional[Principal] = Depends(get_current_principal)
):
    """
    Delete employee. Admin only.
    """
    await employee_service.delete_employee(employee_id, principal)
    return {"success": True, "message": "Employee deleted successfully"}
