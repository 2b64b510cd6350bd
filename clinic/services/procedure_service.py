"""Procedure catalog service."""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.config import settings
from clinic.core.clock import utc_now
from clinic.core.exceptions import NotFoundException
from clinic.core.redis_client import CacheManager
from clinic.models.procedures import procedures
from clinic.repositories.sql import procedure_cache_key
from clinic.schemas.procedures import ProcedureCreate, ProcedureUpdate

PROCEDURE_LIST_CACHE_KEY = "procedure:list"


class ProcedureService:
    """Service for procedure operations."""

    def __init__(self, cache_manager: CacheManager | None = None):
        """Initialize service with optional cache manager."""
        self.cache = cache_manager

    def _invalidate(self) -> None:
        if self.cache:
            self.cache.delete_pattern("procedure:*")

    async def list_procedures(self, db: AsyncSession) -> list[dict]:
        """List the procedure catalog ordered by name, with caching."""
        if self.cache:
            cached = self.cache.get_json(PROCEDURE_LIST_CACHE_KEY)
            if cached is not None:
                return cached

        result = await db.execute(select(procedures).order_by(procedures.c.name))
        catalog = [dict(row) for row in result.mappings().all()]

        if self.cache:
            self.cache.set_json(PROCEDURE_LIST_CACHE_KEY, catalog, ttl=settings.procedure_cache_ttl)

        return catalog

    async def get_procedure(self, db: AsyncSession, procedure_id: int) -> dict:
        """
        Get procedure by ID with caching.

        Raises:
            NotFoundException: If procedure not found
        """
        if self.cache:
            cached = self.cache.get_json(procedure_cache_key(procedure_id))
            if cached:
                return cached

        result = await db.execute(select(procedures).where(procedures.c.id == procedure_id))
        procedure = result.mappings().first()

        if not procedure:
            raise NotFoundException("Procedure not found")

        procedure_dict = dict(procedure)

        if self.cache:
            self.cache.set_json(
                procedure_cache_key(procedure_id), procedure_dict, ttl=settings.procedure_cache_ttl
            )

        return procedure_dict

    async def create_procedure(self, db: AsyncSession, data: ProcedureCreate) -> dict:
        """Add a procedure to the catalog."""
        now = utc_now()
        query = (
            procedures.insert()
            .values(
                name=data.name,
                description=data.description,
                type=data.type.value,
                value=data.value,
                created_at=now,
                updated_at=now,
            )
            .returning(procedures)
        )

        result = await db.execute(query)
        await db.commit()

        self._invalidate()

        return dict(result.mappings().one())

    async def update_procedure(
        self,
        db: AsyncSession,
        procedure_id: int,
        data: ProcedureUpdate,
    ) -> dict:
        """
        Update a procedure.

        Raises:
            NotFoundException: If procedure not found
        """
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        if "type" in update_data:
            update_data["type"] = data.type.value

        query = (
            update(procedures)
            .where(procedures.c.id == procedure_id)
            .values(**update_data, updated_at=utc_now())
            .returning(procedures)
        )

        result = await db.execute(query)
        procedure = result.mappings().first()

        if not procedure:
            await db.rollback()
            raise NotFoundException("Procedure not found")

        await db.commit()

        self._invalidate()

        return dict(procedure)
