"""
User service for business logic.
"""
import logging
from typing import Any, Dict, Optional

from staff_directory.core.errors import Conflict
from staff_directory.core.permissions import Principal, Role
from staff_directory.core.security import get_password_hash
from staff_directory.domains.users.repository import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    """
    Service for user-related business logic.
    """

    def __init__(self, user_repo: Optional[UserRepository] = None):
        """
        Initialize with user repository.

        Args:
            user_repo: Optional user repository instance
        """
        self.user_repo = user_repo or UserRepository()

    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return await self.user_repo.find_by_email(email)

    async def create_user(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a new user with a hashed password.

        Args:
            user_data: name, email, password and role

        Returns:
            Created user document without the password hash

        Raises:
            Conflict: If the email is already registered
        """
        document = {
            "name": user_data["name"].strip(),
            "email": user_data["email"].strip().lower(),
            "password": get_password_hash(user_data["password"]),
            "role": Role(user_data.get("role", Role.STAFF)).value,
            "is_active": user_data.get("is_active", True),
        }
        created = await self.user_repo.create(document)
        logger.info(f"Created user {created['_id']} with role {created['role']}")
        created.pop("password", None)
        return created

    async def resolve_principal(self, user_id: str) -> Optional[Principal]:
        """
        Build the principal for a user ID taken from a verified token.

        Returns:
            Principal, or None if the user is missing, inactive or holds a
            role outside the Role enumeration
        """
        user = await self.user_repo.find_by_id(user_id)
        if not user or not user.get("is_active", False):
            return None

        role = Role.parse(user.get("role"))
        if role is None:
            logger.warning(f"User {user_id} has unknown role {user.get('role')!r}")
            return None

        return Principal(
            identity=user["_id"],
            role=role,
            name=user.get("name"),
            email=user.get("email"),
        )

    async def ensure_admin(self, email: str, password: str, name: str) -> None:
        """Create the administrator account if no user has its email yet."""
        if await self.user_repo.find_by_email(email):
            logger.info("Admin user already exists")
            return

        try:
            await self.create_user({"name": name, "email": email, "password": password, "role": Role.ADMIN})
        except Conflict:
            # Another instance seeded it first
            logger.info("Admin user already exists")
            return
        logger.info("Admin user created successfully")


# Create global instance
user_service = UserService()
