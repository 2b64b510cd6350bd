"""FastAPI dependencies."""

from collections.abc import Callable
from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.config import settings
from clinic.core.exceptions import ForbiddenException
from clinic.core.redis_client import CacheManager, get_redis_client
from clinic.core.security import decode_access_token
from clinic.database import get_db
from clinic.schemas.auth import Actor
from clinic.schemas.common import UserRole
from clinic.services.professional_service import ProfessionalService
from clinic.services.queue_service import QueuePolicy
from clinic.services.user_service import UserService

logger = structlog.get_logger()

# Security
security = HTTPBearer()


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> int:
    """
    Extract and validate user ID from JWT token.

    Args:
        credentials: Bearer token credentials

    Returns:
        User ID from token

    Raises:
        HTTPException: If token is invalid or expired
    """
    payload = decode_access_token(credentials.credentials)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id_str = payload.get("sub")
    if user_id_str is None or not isinstance(user_id_str, str):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return int(user_id_str)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID format",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None


async def get_current_user(
    user_id: Annotated[int, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Get current user from database.

    Raises:
        HTTPException: If user not found or inactive
    """
    user = await UserService().get_user_by_id(db, user_id)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user["is_active"]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    return user


async def get_current_actor(
    user: Annotated[dict, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Actor:
    """Resolve the caller's role and, for physicians, their professional ID."""
    professional_id = None
    if user["role"] == UserRole.PHYSICIAN.value:
        professional = await ProfessionalService().get_by_user_id(db, user["id"])
        if professional:
            professional_id = professional["id"]

    return Actor(user_id=user["id"], role=UserRole(user["role"]), professional_id=professional_id)


def require_roles(*roles: UserRole) -> Callable:
    """
    Build a dependency that only lets the given roles through.

    Raises:
        ForbiddenException: If the caller's role is not listed
    """

    async def checker(actor: Annotated[Actor, Depends(get_current_actor)]) -> Actor:
        if actor.role not in roles:
            raise ForbiddenException("You do not have permission to perform this action")
        return actor

    return checker


def get_cache_manager() -> CacheManager | None:
    """Get the Redis cache manager, or None when Redis is unreachable."""
    try:
        client = get_redis_client()
        client.ping()
    except RedisError as e:
        logger.warning("cache_unavailable", error=str(e))
        return None
    return CacheManager(client)


def get_queue_policy() -> QueuePolicy:
    """Get the queue defaults from settings."""
    return QueuePolicy.from_settings(settings)


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUser = Annotated[dict, Depends(get_current_user)]
CurrentActor = Annotated[Actor, Depends(get_current_actor)]
CacheManagerDep = Annotated[CacheManager | None, Depends(get_cache_manager)]
QueuePolicyDep = Annotated[QueuePolicy, Depends(get_queue_policy)]
