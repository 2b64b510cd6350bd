"""Professional endpoints."""

from fastapi import APIRouter, Depends, status

from clinic.core.exceptions import NotFoundException
from clinic.dependencies import CurrentUser, DatabaseSession, require_roles
from clinic.schemas.common import UserRole
from clinic.schemas.professionals import (
    ProfessionalCreate,
    ProfessionalResponse,
    ProfessionalUpdate,
)
from clinic.services.professional_service import ProfessionalService

router = APIRouter(prefix="/professionals")

admin_only = Depends(require_roles(UserRole.ADMIN))


@router.get("", response_model=list[ProfessionalResponse])
async def list_professionals(db: DatabaseSession, current_user: CurrentUser):
    """List professionals with their user."""
    return await ProfessionalService().list_professionals(db)


@router.post(
    "",
    response_model=ProfessionalResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[admin_only],
)
async def create_professional(data: ProfessionalCreate, db: DatabaseSession):
    """
    Register a physician user as a professional. Admin only.

    Raises:
        NotFoundException: If the user does not exist
        BadRequestException: If the user is not a physician
        ConflictException: If the user is already a professional
    """
    return await ProfessionalService().create_professional(db, data)


@router.get("/user/{user_id}", response_model=ProfessionalResponse)
async def get_professional_by_user(user_id: int, db: DatabaseSession, current_user: CurrentUser):
    """Get the professional record of a user."""
    professional = await ProfessionalService().get_by_user_id(db, user_id)
    if not professional:
        raise NotFoundException("Professional not found")
    return professional


@router.get("/{professional_id}", response_model=ProfessionalResponse)
async def get_professional(professional_id: int, db: DatabaseSession, current_user: CurrentUser):
    """Get professional by ID."""
    return await ProfessionalService().get_professional(db, professional_id)


@router.put(
    "/{professional_id}",
    response_model=ProfessionalResponse,
    dependencies=[admin_only],
)
async def update_professional(
    professional_id: int,
    data: ProfessionalUpdate,
    db: DatabaseSession,
):
    """Update a professional. Admin only."""
    return await ProfessionalService().update_professional(db, professional_id, data)
