"""Procedure catalog endpoints."""

from fastapi import APIRouter, Depends, status

from clinic.dependencies import CacheManagerDep, CurrentUser, DatabaseSession, require_roles
from clinic.schemas.common import UserRole
from clinic.schemas.procedures import ProcedureCreate, ProcedureResponse, ProcedureUpdate
from clinic.services.procedure_service import ProcedureService

router = APIRouter(prefix="/procedures")

admin_only = Depends(require_roles(UserRole.ADMIN))


@router.get("", response_model=list[ProcedureResponse])
async def list_procedures(
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
    current_user: CurrentUser,
):
    """List the procedure catalog."""
    return await ProcedureService(cache_manager).list_procedures(db)


@router.post(
    "",
    response_model=ProcedureResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[admin_only],
)
async def create_procedure(
    data: ProcedureCreate,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
):
    """Add a procedure to the catalog. Admin only."""
    return await ProcedureService(cache_manager).create_procedure(db, data)


@router.get("/{procedure_id}", response_model=ProcedureResponse)
async def get_procedure(
    procedure_id: int,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
    current_user: CurrentUser,
):
    """Get procedure by ID."""
    return await ProcedureService(cache_manager).get_procedure(db, procedure_id)


@router.put("/{procedure_id}", response_model=ProcedureResponse, dependencies=[admin_only])
async def update_procedure(
    procedure_id: int,
    data: ProcedureUpdate,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
):
    """Update a procedure. Admin only."""
    return await ProcedureService(cache_manager).update_procedure(db, procedure_id, data)
