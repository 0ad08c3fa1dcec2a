"""
Tests for staff_directory/domains/employees/service.py - employee lifecycle.
"""
import time

import pytest

from staff_directory.core.errors import Forbidden, NotFound, Unauthenticated, ValidationFailed
from staff_directory.domains.employees.query import QueryParams
from staff_directory.domains.employees.service import validate_fields


class TestValidateFields:
    """Test field validation and normalization."""

    def test_normalizes_valid_fields(self, employee_fields):
        data = validate_fields({**employee_fields, "name": "  Ada  ", "email": "Ada@X.com", "extra": 1})

        assert data["name"] == "Ada"
        assert data["email"] == "ada@x.com"
        assert data["salary"] == 1000.0
        assert "extra" not in data

    def test_zero_salary_is_allowed(self, employee_fields):
        assert validate_fields({**employee_fields, "salary": 0})["salary"] == 0

    @pytest.mark.parametrize("field, value, message", [
        ("name", "   ", "Name is required"),
        ("email", "not-an-email", "Please provide a valid email"),
        ("phone", "123456789", "Phone must be a valid 10-digit number"),
        ("phone", "12345678901", "Phone must be a valid 10-digit number"),
        ("phone", "12345abcde", "Phone must be a valid 10-digit number"),
        ("designation", "", "Designation is required"),
        ("salary", -1, "Salary cannot be negative"),
    ])
    def test_reports_offending_field(self, employee_fields, field, value, message):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_fields({**employee_fields, field: value})

        assert exc_info.value.field_errors == [{"field": field, "message": message}]

    def test_missing_fields_are_all_reported(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_fields({"name": "Ada"})

        fields = {error["field"] for error in exc_info.value.field_errors}
        assert fields == {"email", "phone", "designation", "salary"}

    @pytest.mark.parametrize("email", [
        "a" * 26 + "!",
        "a" * 200 + "@" + "b" * 40 + "!",
        "ab" * 100 + "@x.c",
    ])
    def test_malformed_email_is_rejected_quickly(self, employee_fields, email):
        started = time.perf_counter()
        with pytest.raises(ValidationFailed) as exc_info:
            validate_fields({**employee_fields, "email": email})
        elapsed = time.perf_counter() - started

        assert elapsed < 0.5
        assert exc_info.value.field_errors[0]["field"] == "email"

    def test_overlong_email_is_rejected(self, employee_fields):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_fields({**employee_fields, "email": "a" * 250 + "@x.com"})

        assert exc_info.value.field_errors[0]["field"] == "email"

    @pytest.mark.parametrize("email", ["ada.l@x.com", "ada-l@mail.x.co.uk", "a_b@x.io"])
    def test_dotted_and_hyphenated_emails_are_valid(self, employee_fields, email):
        assert validate_fields({**employee_fields, "email": email})["email"] == email

    def test_numeric_phone_is_read_as_digits(self, employee_fields):
        assert validate_fields({**employee_fields, "phone": 1234567890})["phone"] == "1234567890"

    @pytest.mark.parametrize("salary", [True, "1000", None])
    def test_salary_must_be_a_json_number(self, employee_fields, salary):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_fields({**employee_fields, "salary": salary})

        assert exc_info.value.field_errors == [{"field": "salary", "message": "Salary must be a number"}]


class TestCreateEmployee:

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_creator(self, employee_service, staff_principal, employee_fields):
        created = await employee_service.create_employee(employee_fields, staff_principal)

        assert created["_id"]
        assert created["email"] == "ada@x.com"
        assert created["created_by"] == {
            "_id": staff_principal.identity,
            "name": "Staff User",
            "email": "staff@example.com",
        }

    @pytest.mark.asyncio
    async def test_create_without_principal_is_unauthenticated(self, employee_service, employee_repo, employee_fields):
        with pytest.raises(Unauthenticated):
            await employee_service.create_employee(employee_fields, None)

        assert employee_repo.calls == []

    @pytest.mark.asyncio
    async def test_authorization_precedes_validation(self, employee_service):
        with pytest.raises(Unauthenticated):
            await employee_service.create_employee({"salary": -1}, None)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field, value", [
        ("salary", -0.01),
        ("email", "ada@"),
        ("phone", "+1234567890"),
    ])
    async def test_invalid_fields_never_reach_storage(
            self, employee_service, employee_repo, staff_principal, employee_fields, field, value
    ):
        with pytest.raises(ValidationFailed):
            await employee_service.create_employee({**employee_fields, field: value}, staff_principal)

        assert employee_repo.calls == []


class TestUpdateEmployee:

    @pytest.mark.asyncio
    async def test_update_replaces_fields_keeps_identity(
            self, employee_service, staff_principal, admin_principal, employee_fields
    ):
        created = await employee_service.create_employee(employee_fields, staff_principal)

        updated = await employee_service.update_employee(
            created["_id"],
            {**employee_fields, "designation": "Lead", "email": "ada.l@x.com"},
            admin_principal
        )

        assert updated["_id"] == created["_id"]
        assert updated["designation"] == "Lead"
        assert updated["email"] == "ada.l@x.com"
        assert updated["created_by"]["_id"] == staff_principal.identity

    @pytest.mark.asyncio
    async def test_update_missing_employee_is_not_found(self, employee_service, staff_principal, employee_fields):
        with pytest.raises(NotFound) as exc_info:
            await employee_service.update_employee("5f1d7f3e9b1e8b3a2c4d5e6f", employee_fields, staff_principal)

        assert exc_info.value.to_response()["id"] == "5f1d7f3e9b1e8b3a2c4d5e6f"

    @pytest.mark.asyncio
    async def test_invalid_update_never_reaches_storage(
            self, employee_service, employee_repo, staff_principal, employee_fields
    ):
        created = await employee_service.create_employee(employee_fields, staff_principal)
        employee_repo.calls.clear()

        with pytest.raises(ValidationFailed):
            await employee_service.update_employee(created["_id"], {**employee_fields, "salary": -5}, staff_principal)

        assert employee_repo.calls == []


class TestDeleteEmployee:

    @pytest.mark.asyncio
    async def test_staff_cannot_delete(self, employee_service, staff_principal, employee_fields):
        created = await employee_service.create_employee(employee_fields, staff_principal)

        with pytest.raises(Forbidden):
            await employee_service.delete_employee(created["_id"], staff_principal)

        page = await employee_service.list_employees(QueryParams(), staff_principal)
        assert [e["_id"] for e in page.data] == [created["_id"]]

    @pytest.mark.asyncio
    async def test_anonymous_cannot_delete(self, employee_service, employee_repo, staff_principal, employee_fields):
        created = await employee_service.create_employee(employee_fields, staff_principal)

        with pytest.raises(Unauthenticated):
            await employee_service.delete_employee(created["_id"], None)

        assert created["_id"] in employee_repo.documents

    @pytest.mark.asyncio
    async def test_admin_deletes(self, employee_service, employee_repo, staff_principal, admin_principal, employee_fields):
        created = await employee_service.create_employee(employee_fields, staff_principal)

        await employee_service.delete_employee(created["_id"], admin_principal)

        assert employee_repo.documents == {}
        with pytest.raises(NotFound):
            await employee_service.get_employee(created["_id"], staff_principal)

    @pytest.mark.asyncio
    async def test_delete_missing_is_not_found(self, employee_service, admin_principal):
        with pytest.raises(NotFound):
            await employee_service.delete_employee("5f1d7f3e9b1e8b3a2c4d5e6f", admin_principal)


class TestReadEmployees:

    @pytest.mark.asyncio
    async def test_list_requires_principal(self, employee_service, employee_repo):
        with pytest.raises(Unauthenticated):
            await employee_service.list_employees(QueryParams(), None)

        assert employee_repo.calls == []

    @pytest.mark.asyncio
    async def test_get_employee_resolves_creator(self, employee_service, admin_principal, staff_principal, employee_fields):
        created = await employee_service.create_employee(employee_fields, admin_principal)

        fetched = await employee_service.get_employee(created["_id"], staff_principal)

        assert fetched["name"] == "Ada"
        assert fetched["created_by"]["name"] == "Admin User"
