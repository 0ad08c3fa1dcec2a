"""
Auth service for authentication.
"""
import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from staff_directory.core.config import settings
from staff_directory.core.errors import Unauthenticated
from staff_directory.core.permissions import Role
from staff_directory.core.security import create_access_token, verify_password
from staff_directory.domains.users.service import UserService, user_service

logger = logging.getLogger(__name__)


class AuthService:
    """
    Service for authentication.
    """

    def __init__(self, users: Optional[UserService] = None):
        self.users = users or user_service

    async def authenticate_user(self, email: str, password: str) -> Optional[Dict[str, Any]]:
        """
        Authenticate a user with email and password.

        Args:
            email: User email
            password: User password

        Returns:
            User document if authentication successful, None otherwise
        """
        user = await self.users.get_user_by_email(email)
        if not user:
            return None

        if not user.get("is_active", False):
            return None

        try:
            if not verify_password(password, user.get("password", "")):
                return None
        except ValueError:
            # Stored hash is not a recognizable bcrypt hash
            logger.error(f"Unreadable password hash for user {user['_id']}")
            return None

        return user

    async def login(self, email: str, password: str) -> Dict[str, str]:
        """
        Login a user and return access token.

        Raises:
            Unauthenticated: If authentication fails
        """
        user = await self.authenticate_user(email, password)
        if not user:
            logger.warning(f"Failed login for {email}")
            raise Unauthenticated("Incorrect email or password")

        access_token = create_access_token(
            subject=str(user["_id"]),
            role=user.get("role"),
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        )

        return {"access_token": access_token, "token_type": "bearer"}

    async def register(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Register a new staff user.

        Raises:
            Conflict: If email already registered
        """
        return await self.users.create_user({**user_data, "role": Role.STAFF})


# Create global instance
auth_service = AuthService()
