"""
Roles, principals and the authorization gate.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional

from staff_directory.core.errors import DirectoryError, Forbidden, Unauthenticated

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Closed set of roles a principal can hold"""
    ADMIN = "admin"
    STAFF = "staff"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Role"]:
        """Return the matching role, or None for anything outside the enumeration."""
        try:
            return cls(value)
        except ValueError:
            return None


# Any authenticated principal
ANY_AUTHENTICATED: FrozenSet[Role] = frozenset()

ADMIN_ONLY: FrozenSet[Role] = frozenset({Role.ADMIN})


@dataclass(frozen=True)
class Principal:
    """The authenticated caller."""
    identity: str
    role: Role
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: Optional[str] = None
    error: Optional[DirectoryError] = None


class AuthorizationGate:
    """
    Decides whether a principal may perform an operation.

    An empty required-role set admits any authenticated principal; otherwise
    the principal's role must be a member of the set. The gate has no side
    effects and is evaluated before any storage access.
    """

    def check(self, principal: Optional[Principal], required_roles: FrozenSet[Role]) -> AccessDecision:
        """
        Evaluate access without raising.

        Args:
            principal: Authenticated caller, or None when unauthenticated
            required_roles: Roles allowed to proceed (empty means any role)

        Returns:
            AccessDecision describing the outcome
        """
        if principal is None:
            error = Unauthenticated()
            return AccessDecision(False, error.message, error)

        if required_roles and principal.role not in required_roles:
            error = Forbidden(required_roles)
            return AccessDecision(False, error.message, error)

        return AccessDecision(True)

    def authorize(self, principal: Optional[Principal], required_roles: FrozenSet[Role]) -> Principal:
        """
        Evaluate access and raise the denial error if not allowed.

        Returns:
            The admitted principal

        Raises:
            Unauthenticated: If no principal is present
            Forbidden: If the principal's role is not in required_roles
        """
        decision = self.check(principal, required_roles)
        if not decision.allowed:
            identity = principal.identity if principal else "anonymous"
            logger.warning(f"Access denied for {identity}: {decision.reason}")
            raise decision.error
        return principal


# Create global gate instance
authorization_gate = AuthorizationGate()
