"""
Auth API routes for authentication.
"""
from typing import Optional
from fastapi import APIRouter, Depends, status

from staff_directory.core.permissions import ANY_AUTHENTICATED, Principal, authorization_gate
from staff_directory.dependencies.auth import get_current_principal
from staff_directory.domains.auth.service import auth_service
from staff_directory.schemas.auth import LoginRequest, Token
from staff_directory.schemas.user import PrincipalResponse, UserCreate, UserResponse

router = APIRouter()


@router.post("/login", response_model=Token)
async def login_for_access_token(credentials: LoginRequest):
    """
    Login with email and password to get a bearer token.
    """
    return await auth_service.login(credentials.email, credentials.password)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(user_in: UserCreate):
    """
    Register a new staff user.
    """
    return await auth_service.register(user_in.model_dump())


@router.get("/me", response_model=PrincipalResponse)
async def read_current_principal(principal: Optional[Principal] = Depends(get_current_principal)):
    """
    Get the authenticated caller.
    """
    principal = authorization_gate.authorize(principal, ANY_AUTHENTICATED)
    return {
        "id": principal.identity,
        "name": principal.name,
        "email": principal.email,
        "role": principal.role,
    }
