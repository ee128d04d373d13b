"""
Authentication API Routes for Tagfolio.

Handles:
- User registration
- User login (token issuance)
- Current user retrieval
"""

from fastapi import APIRouter, Depends, status
from loguru import logger

from tagfolio.api.dependencies import get_current_user_id, get_identity_service
from tagfolio.api.schemas import AuthResponse, Credentials, ErrorResponse, UserResponse
from tagfolio.errors import AuthError, AuthFailure
from tagfolio.identity import IdentityService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid email or password"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
)
def register(
    credentials: Credentials,
    identity: IdentityService = Depends(get_identity_service),
):
    """Register a new user and return a session token."""
    result = identity.register(credentials.email, credentials.password)
    return result.to_dict()


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid email or password"},
    },
)
def login(
    credentials: Credentials,
    identity: IdentityService = Depends(get_identity_service),
):
    """
    Login endpoint.
    Returns a session token if credentials are valid.
    """
    result = identity.login(credentials.email, credentials.password)
    logger.info(f"User {result.user.id} logged in")
    return result.to_dict()


@router.get("/me", response_model=UserResponse)
def read_users_me(
    user_id: str = Depends(get_current_user_id),
    identity: IdentityService = Depends(get_identity_service),
):
    """Get current user profile."""
    user = identity.get_user(user_id)
    if user is None:
        raise AuthError(AuthFailure.USER_NOT_FOUND)
    return user.to_dict()
