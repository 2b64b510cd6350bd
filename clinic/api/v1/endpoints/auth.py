"""Authentication endpoints."""

from fastapi import APIRouter, status

from clinic.dependencies import CurrentUser, DatabaseSession
from clinic.schemas.auth import LoginRequest, LoginResponse
from clinic.schemas.users import UserResponse
from clinic.services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Email and password login",
)
async def login(request: LoginRequest, db: DatabaseSession) -> LoginResponse:
    """
    Authenticate with email and password.

    Args:
        request: Login credentials
        db: Database session

    Returns:
        Access token and user information

    Raises:
        UnauthorizedException: If the credentials are invalid
    """
    user, token = await AuthService().login(db, request.email, request.password)
    return LoginResponse(access_token=token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse, summary="Get current user")
async def get_me(current_user: CurrentUser) -> UserResponse:
    """Return the authenticated user."""
    return UserResponse.model_validate(current_user)
