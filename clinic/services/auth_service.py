"""Authentication service for password login and JWT."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.core.exceptions import UnauthorizedException
from clinic.core.security import create_access_token, verify_password
from clinic.services.user_service import UserService

logger = structlog.get_logger()


class AuthService:
    """Authentication service issuing access tokens."""

    def __init__(self, user_service: UserService | None = None):
        """Initialize auth service."""
        self.users = user_service or UserService()

    async def login(self, db: AsyncSession, email: str, password: str) -> tuple[dict, str]:
        """
        Check credentials and issue an access token.

        Args:
            db: Database session
            email: User email
            password: Plain password

        Returns:
            Tuple of (user dict, access token)

        Raises:
            UnauthorizedException: If the credentials are wrong or the account is inactive
        """
        user = await self.users.get_user_by_email(db, email)

        if not user or not verify_password(password, user["password_hash"]):
            logger.info("login_failed", email=email)
            raise UnauthorizedException("Invalid email or password")

        if not user["is_active"]:
            logger.info("login_rejected_inactive", user_id=user["id"])
            raise UnauthorizedException("User account is deactivated")

        await self.users.update_last_login(db, user["id"])

        token = create_access_token({"sub": str(user["id"]), "role": user["role"]})
        logger.info("login_succeeded", user_id=user["id"], role=user["role"])

        return user, token
