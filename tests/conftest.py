"""
Shared test fixtures for the staff directory tests.
"""
import asyncio
import os
import re
from datetime import datetime
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo import DESCENDING

# Set test environment before importing app modules
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")

from staff_directory.core.errors import Conflict
from staff_directory.core.permissions import AuthorizationGate, Principal, Role
from staff_directory.domains.employees.query import DirectoryQueryEngine
from staff_directory.domains.employees.service import EmployeeService
from staff_directory.domains.employees.uniqueness import UniquenessInvariantEnforcer


def _matches(document: Dict[str, Any], query: Dict[str, Any]) -> bool:
    """Evaluate the subset of Mongo filters the directory issues."""
    if "$or" in query:
        return any(_matches(document, clause) for clause in query["$or"])
    for field, condition in query.items():
        value = document.get(field)
        if isinstance(condition, dict) and "$regex" in condition:
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            if value is None or not re.search(condition["$regex"], str(value), flags):
                return False
        elif value != condition:
            return False
    return True


def _sort_value(value: Any) -> Any:
    return value.casefold() if isinstance(value, str) else value


class InMemoryEmployeeRepository:
    """
    Employee repository double backed by a dict.

    create/update enforce email uniqueness without yielding to the event
    loop, like the unique index does server-side. email_taken yields once,
    so concurrent callers can all pass the pre-check.
    """

    resource_name = "Employee"

    def __init__(self):
        self.documents: Dict[str, Dict[str, Any]] = {}
        self.calls: List[str] = []

    def _email_holder(self, email: str) -> Optional[str]:
        for document in self.documents.values():
            if document["email"] == email:
                return document["_id"]
        return None

    async def find_by_id(self, id_value: Any) -> Optional[Dict[str, Any]]:
        self.calls.append("find_by_id")
        document = self.documents.get(str(id_value))
        return dict(document) if document else None

    async def find_many(self, query=None, skip=0, limit=100, sort=None, collation=None, projection=None):
        self.calls.append("find_many")
        documents = [d for d in self.documents.values() if _matches(d, query or {})]
        for key, direction in reversed(list(sort or [])):
            documents.sort(key=lambda d: _sort_value(d.get(key)), reverse=direction == DESCENDING)
        return [dict(d) for d in documents[skip:skip + limit]]

    async def count(self, query=None) -> int:
        self.calls.append("count")
        return len([d for d in self.documents.values() if _matches(d, query or {})])

    async def email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        self.calls.append("email_taken")
        await asyncio.sleep(0)
        holder = self._email_holder(email)
        return holder is not None and holder != exclude_id

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append("create")
        if self._email_holder(data["email"]) is not None:
            raise Conflict("email", data["email"])
        now = datetime.utcnow()
        document = {**data, "_id": str(ObjectId()), "created_at": now, "updated_at": now}
        if isinstance(document.get("created_by"), ObjectId):
            document["created_by"] = str(document["created_by"])
        self.documents[document["_id"]] = document
        return dict(document)

    async def update(self, id_value: Any, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        self.calls.append("update")
        document = self.documents.get(str(id_value))
        if document is None:
            return None
        holder = self._email_holder(data.get("email", document["email"]))
        if holder is not None and holder != document["_id"]:
            raise Conflict("email", data["email"])
        document.update(data)
        document["updated_at"] = datetime.utcnow()
        return dict(document)

    async def delete(self, id_value: Any) -> bool:
        self.calls.append("delete")
        return self.documents.pop(str(id_value), None) is not None


@pytest.fixture
def admin_principal():
    """Create an admin principal for testing."""
    return Principal(identity=str(ObjectId()), role=Role.ADMIN, name="Admin User", email="admin@example.com")


@pytest.fixture
def staff_principal():
    """Create a staff principal for testing."""
    return Principal(identity=str(ObjectId()), role=Role.STAFF, name="Staff User", email="staff@example.com")


@pytest.fixture
def employee_fields():
    """Valid employee fields."""
    return {
        "name": "Ada",
        "email": "ada@x.com",
        "phone": "1234567890",
        "designation": "Engineer",
        "salary": 1000,
    }


@pytest.fixture
def employee_repo():
    return InMemoryEmployeeRepository()


@pytest.fixture
def user_repo(admin_principal, staff_principal):
    """User repository mock that knows the two test principals."""
    known = {
        p.identity: {"_id": p.identity, "name": p.name, "email": p.email}
        for p in (admin_principal, staff_principal)
    }

    async def find_display_identities(user_ids):
        return {user_id: known[user_id] for user_id in user_ids if user_id in known}

    repo = MagicMock()
    repo.find_display_identities = AsyncMock(side_effect=find_display_identities)
    return repo


@pytest.fixture
def query_engine(employee_repo, user_repo):
    return DirectoryQueryEngine(employee_repo=employee_repo, user_repo=user_repo)


@pytest.fixture
def employee_service(employee_repo, query_engine):
    """Employee service wired to the in-memory repository."""
    return EmployeeService(
        employee_repo=employee_repo,
        uniqueness=UniquenessInvariantEnforcer(employee_repo),
        query_engine=query_engine,
        gate=AuthorizationGate(),
    )


@pytest.fixture
def mock_cursor():
    """Create a mock Motor cursor; chaining methods return the cursor itself."""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=[])
    return cursor


@pytest.fixture
def mock_collection(mock_cursor):
    """Create a mock Motor collection."""
    collection = MagicMock()
    collection.find.return_value = mock_cursor
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.delete_one = AsyncMock()
    collection.count_documents = AsyncMock(return_value=0)
    collection.create_index = AsyncMock()
    return collection
