"""User service for business logic."""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.core.clock import utc_now
from clinic.core.exceptions import ConflictException
from clinic.core.security import get_password_hash
from clinic.models.users import users
from clinic.schemas.users import UserCreate, UserUpdate


class UserService:
    """Service for user operations."""

    async def create_user(self, db: AsyncSession, user_data: UserCreate) -> dict:
        """
        Create a new user.

        Raises:
            ConflictException: If the email is already registered
        """
        if await self.get_user_by_email(db, user_data.email):
            raise ConflictException("Email already registered")

        now = utc_now()
        query = (
            users.insert()
            .values(
                email=user_data.email,
                password_hash=get_password_hash(user_data.password),
                name=user_data.name,
                phone=user_data.phone,
                role=user_data.role.value,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            .returning(users)
        )

        result = await db.execute(query)
        await db.commit()
        user = result.mappings().first()

        if not user:
            raise ValueError("Failed to create user")

        return dict(user)

    async def get_user_by_id(self, db: AsyncSession, user_id: int) -> dict | None:
        """Get user by ID."""
        query = select(users).where(users.c.id == user_id)
        result = await db.execute(query)
        user = result.mappings().first()
        return dict(user) if user else None

    async def get_user_by_email(self, db: AsyncSession, email: str) -> dict | None:
        """Get user by email."""
        query = select(users).where(users.c.email == email)
        result = await db.execute(query)
        user = result.mappings().first()
        return dict(user) if user else None

    async def list_active_users(self, db: AsyncSession) -> list[dict]:
        """List active users ordered by name."""
        query = select(users).where(users.c.is_active.is_(True)).order_by(users.c.name)
        result = await db.execute(query)
        return [dict(user) for user in result.mappings().all()]

    async def update_user(
        self,
        db: AsyncSession,
        user_id: int,
        user_data: UserUpdate,
    ) -> dict | None:
        """Update user profile."""
        update_data = user_data.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data:
            return await self.get_user_by_id(db, user_id)

        if "password" in update_data:
            update_data["password_hash"] = get_password_hash(update_data.pop("password"))

        update_data["updated_at"] = utc_now()

        query = update(users).where(users.c.id == user_id).values(**update_data).returning(users)

        result = await db.execute(query)
        await db.commit()
        user = result.mappings().first()

        return dict(user) if user else None

    async def update_last_login(self, db: AsyncSession, user_id: int) -> None:
        """Update user's last login timestamp."""
        query = update(users).where(users.c.id == user_id).values(last_login_at=utc_now())
        await db.execute(query)
        await db.commit()
