"""Professional service for business logic."""

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.core.clock import utc_now
from clinic.core.exceptions import BadRequestException, ConflictException, NotFoundException
from clinic.models.professionals import professionals
from clinic.models.users import users
from clinic.schemas.common import UserRole
from clinic.schemas.professionals import ProfessionalCreate, ProfessionalUpdate

logger = structlog.get_logger()

_USER_SUMMARY_COLUMNS = (users.c.id, users.c.name, users.c.email, users.c.role)


class ProfessionalService:
    """Service for professional operations."""

    async def _attach_users(self, db: AsyncSession, rows: list[dict]) -> list[dict]:
        """Embed the user summary into each professional."""
        user_ids = {row["user_id"] for row in rows}
        if not user_ids:
            return rows

        result = await db.execute(select(*_USER_SUMMARY_COLUMNS).where(users.c.id.in_(user_ids)))
        users_by_id = {row["id"]: dict(row) for row in result.mappings().all()}

        for row in rows:
            row["user"] = users_by_id.get(row["user_id"])
        return rows

    async def list_professionals(self, db: AsyncSession) -> list[dict]:
        """List professionals ordered by their user's name."""
        query = (
            select(professionals)
            .join(users, users.c.id == professionals.c.user_id)
            .order_by(users.c.name)
        )
        result = await db.execute(query)
        return await self._attach_users(db, [dict(row) for row in result.mappings().all()])

    async def get_professional(self, db: AsyncSession, professional_id: int) -> dict:
        """
        Get professional by ID with its user.

        Raises:
            NotFoundException: If professional not found
        """
        query = select(professionals).where(professionals.c.id == professional_id)
        result = await db.execute(query)
        professional = result.mappings().first()

        if not professional:
            raise NotFoundException("Professional not found")

        [enriched] = await self._attach_users(db, [dict(professional)])
        return enriched

    async def get_by_user_id(self, db: AsyncSession, user_id: int) -> dict | None:
        """Get professional by user ID."""
        query = select(professionals).where(professionals.c.user_id == user_id)
        result = await db.execute(query)
        professional = result.mappings().first()

        if not professional:
            return None

        [enriched] = await self._attach_users(db, [dict(professional)])
        return enriched

    async def create_professional(self, db: AsyncSession, data: ProfessionalCreate) -> dict:
        """
        Register a physician user as a professional.

        Args:
            db: Database session
            data: Professional creation data

        Returns:
            Created professional with its user

        Raises:
            NotFoundException: If the user does not exist
            BadRequestException: If the user is not a physician
            ConflictException: If the user already has a professional record
        """
        result = await db.execute(select(users).where(users.c.id == data.user_id))
        user = result.mappings().first()

        if not user:
            raise NotFoundException("User not found")

        if user["role"] != UserRole.PHYSICIAN.value:
            raise BadRequestException("Only physicians can be registered as professionals")

        if await self.get_by_user_id(db, data.user_id):
            raise ConflictException("This user is already registered as a professional")

        now = utc_now()
        query = (
            professionals.insert()
            .values(
                user_id=data.user_id,
                specialty=data.specialty,
                commission=data.commission,
                created_at=now,
                updated_at=now,
            )
            .returning(professionals)
        )

        result = await db.execute(query)
        await db.commit()
        professional = dict(result.mappings().one())

        logger.info(
            "professional_created",
            professional_id=professional["id"],
            user_id=data.user_id,
        )

        [enriched] = await self._attach_users(db, [professional])
        return enriched

    async def update_professional(
        self,
        db: AsyncSession,
        professional_id: int,
        data: ProfessionalUpdate,
    ) -> dict:
        """
        Update a professional and the name or phone of its user.

        Raises:
            NotFoundException: If professional not found
        """
        professional = await self.get_professional(db, professional_id)
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        now = utc_now()

        user_data = {key: update_data.pop(key) for key in ("name", "phone") if key in update_data}
        if user_data:
            await db.execute(
                update(users)
                .where(users.c.id == professional["user_id"])
                .values(**user_data, updated_at=now)
            )

        if update_data:
            await db.execute(
                update(professionals)
                .where(professionals.c.id == professional_id)
                .values(**update_data, updated_at=now)
            )

        await db.commit()
        return await self.get_professional(db, professional_id)
