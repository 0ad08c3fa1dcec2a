# staff_directory/dependencies/auth.py
from typing import Optional

from fastapi import Depends

from staff_directory.core.permissions import Principal
from staff_directory.core.security import decode_access_token, oauth2_scheme
from staff_directory.domains.users.service import user_service


async def get_current_principal(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[Principal]:
    """
    Resolve the bearer credential into a principal.

    Returns None instead of raising for a missing, invalid or expired token,
    or for a user that no longer qualifies; the authorization gate turns that
    into Unauthenticated.
    """
    if not token:
        return None

    payload = decode_access_token(token)
    if payload is None:
        return None

    return await user_service.resolve_principal(payload["sub"])
