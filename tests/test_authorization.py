"""
Tests for staff_directory/core/permissions.py - roles and the authorization gate.
"""
import pytest

from staff_directory.core.errors import Forbidden, Unauthenticated
from staff_directory.core.permissions import (
    ADMIN_ONLY,
    ANY_AUTHENTICATED,
    AuthorizationGate,
    Role,
)


class TestRole:
    """Test the closed role enumeration."""

    def test_parse_known_role(self):
        assert Role.parse("admin") is Role.ADMIN
        assert Role.parse("staff") is Role.STAFF

    @pytest.mark.parametrize("value", ["Admin", "superuser", "", None])
    def test_parse_unknown_role_returns_none(self, value):
        assert Role.parse(value) is None


class TestAuthorizationGate:
    """Test gate decisions."""

    def test_missing_principal_is_unauthenticated(self):
        gate = AuthorizationGate()

        decision = gate.check(None, ANY_AUTHENTICATED)

        assert decision.allowed is False
        assert isinstance(decision.error, Unauthenticated)

    def test_any_authenticated_admits_staff(self, staff_principal):
        decision = AuthorizationGate().check(staff_principal, ANY_AUTHENTICATED)

        assert decision.allowed is True
        assert decision.error is None

    def test_admin_only_rejects_staff(self, staff_principal):
        decision = AuthorizationGate().check(staff_principal, ADMIN_ONLY)

        assert decision.allowed is False
        assert isinstance(decision.error, Forbidden)
        assert decision.error.required_roles == ADMIN_ONLY

    def test_authorize_returns_admitted_principal(self, admin_principal):
        assert AuthorizationGate().authorize(admin_principal, ADMIN_ONLY) is admin_principal

    def test_authorize_raises_unauthenticated(self):
        with pytest.raises(Unauthenticated):
            AuthorizationGate().authorize(None, ADMIN_ONLY)

    def test_authorize_raises_forbidden(self, staff_principal):
        with pytest.raises(Forbidden) as exc_info:
            AuthorizationGate().authorize(staff_principal, ADMIN_ONLY)

        response = exc_info.value.to_response()
        assert response["success"] is False
        assert response["code"] == "FORBIDDEN"
        assert response["required_roles"] == ["admin"]
        assert exc_info.value.http_status == 403

    def test_unauthenticated_carries_bearer_challenge(self):
        assert Unauthenticated().headers == {"WWW-Authenticate": "Bearer"}
        assert Unauthenticated().http_status == 401
