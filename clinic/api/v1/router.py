"""API v1 router configuration."""

from fastapi import APIRouter

from clinic.api.v1.endpoints import (
    appointments,
    auth,
    evolutions,
    health,
    patients,
    procedures,
    professionals,
    queue,
    users,
)

api_router = APIRouter()

# Include routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, tags=["Users"])
api_router.include_router(professionals.router, tags=["Professionals"])
api_router.include_router(patients.router, tags=["Patients"])
api_router.include_router(procedures.router, tags=["Procedures"])
api_router.include_router(appointments.router, prefix="/appointments", tags=["Appointments"])
api_router.include_router(queue.router, tags=["Queue"])
api_router.include_router(evolutions.router, tags=["Evolutions"])
