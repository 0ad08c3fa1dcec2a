"""
Domain error hierarchy for the staff directory.

Every failure the directory can report is a DirectoryError subclass carrying a
stable code, the HTTP status it maps to and whether a caller may retry it.
Only storage failures are retryable; the core itself never retries.
"""
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from fastapi import status


class DirectoryError(Exception):
    """Base exception for all directory errors."""

    code = "DIRECTORY_ERROR"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    retryable = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return None

    def to_response(self) -> Dict[str, Any]:
        """Convert to the JSON envelope returned to API callers."""
        response = {
            "success": False,
            "code": self.code,
            "message": self.message,
        }
        response.update(self.details)
        return response


class Unauthenticated(DirectoryError):
    code = "UNAUTHENTICATED"
    http_status = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)

    @property
    def headers(self) -> Optional[Dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class Forbidden(DirectoryError):
    code = "FORBIDDEN"
    http_status = status.HTTP_403_FORBIDDEN

    def __init__(self, required_roles: Iterable[Any]):
        self.required_roles: FrozenSet[Any] = frozenset(required_roles)
        names = sorted(getattr(role, "value", str(role)) for role in self.required_roles)
        super().__init__(
            f"Access denied. Only {', '.join(names)} can perform this action.",
            {"required_roles": names},
        )


class ValidationFailed(DirectoryError):
    code = "VALIDATION_FAILED"
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, field_errors: List[Dict[str, str]]):
        self.field_errors = field_errors
        super().__init__("Validation failed", {"errors": field_errors})

    @classmethod
    def from_pydantic(cls, errors: Iterable[Dict[str, Any]]) -> "ValidationFailed":
        """
        Build from pydantic error dicts (ValidationError.errors() or
        RequestValidationError.errors()).
        """
        field_errors = []
        for error in errors:
            loc = [str(part) for part in error.get("loc", ()) if part != "body"]
            message = str(error.get("msg", "Invalid value"))
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            field_errors.append({"field": ".".join(loc) or "__root__", "message": message})
        return cls(field_errors)


class Conflict(DirectoryError):
    code = "CONFLICT"
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, field: str, value: Any, resource: str = "Employee"):
        self.field = field
        self.value = value
        super().__init__(
            f"{resource} with this {field} already exists",
            {"field": field},
        )


class NotFound(DirectoryError):
    code = "NOT_FOUND"
    http_status = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: Any):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found", {"id": str(resource_id)})


class InvalidArgument(DirectoryError):
    code = "INVALID_ARGUMENT"
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, argument: str, message: str):
        self.argument = argument
        super().__init__(message, {"argument": argument})


class StorageUnavailable(DirectoryError):
    code = "UNAVAILABLE"
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True

    def __init__(self, message: str = "Storage is unavailable, please retry later"):
        super().__init__(message, {"retryable": True})


class StorageTimeout(StorageUnavailable):
    code = "TIMEOUT"
    http_status = status.HTTP_504_GATEWAY_TIMEOUT

    def __init__(self, message: str = "Storage did not respond in time, please retry later"):
        super().__init__(message)
