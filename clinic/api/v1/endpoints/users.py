"""User endpoints."""

from fastapi import APIRouter, Depends, status

from clinic.dependencies import CurrentUser, DatabaseSession, require_roles
from clinic.schemas.common import UserRole
from clinic.schemas.users import UserCreate, UserResponse, UserUpdate
from clinic.services.user_service import UserService

router = APIRouter(prefix="/users")

admin_only = Depends(require_roles(UserRole.ADMIN))


@router.get("", response_model=list[UserResponse], dependencies=[admin_only])
async def list_users(db: DatabaseSession) -> list[UserResponse]:
    """List active users. Admin only."""
    users = await UserService().list_active_users(db)
    return [UserResponse.model_validate(user) for user in users]


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[admin_only],
)
async def create_user(user_data: UserCreate, db: DatabaseSession) -> UserResponse:
    """
    Create a user account. Admin only.

    Raises:
        ConflictException: If the email is already registered
    """
    user = await UserService().create_user(db, user_data)
    return UserResponse.model_validate(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(current_user: CurrentUser) -> UserResponse:
    """Get current user's profile."""
    return UserResponse.model_validate(current_user)


@router.patch("/me", response_model=UserResponse)
async def update_current_user_profile(
    user_data: UserUpdate,
    db: DatabaseSession,
    current_user: CurrentUser,
) -> UserResponse:
    """Update current user's name, phone or password."""
    user = await UserService().update_user(db, current_user["id"], user_data)
    return UserResponse.model_validate(user)
