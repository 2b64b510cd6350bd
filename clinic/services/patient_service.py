"""Patient service for business logic."""

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.core.clock import utc_now
from clinic.core.exceptions import NotFoundException
from clinic.models.patients import patients
from clinic.schemas.common import Gender
from clinic.schemas.patients import PatientCreate, PatientQuickCreate, PatientUpdate

logger = structlog.get_logger()

QUICK_REGISTRATION_NOTE = "Quick registration - complete the remaining data at check-in"

# Fields a quick registration leaves empty
_COMPLETION_FIELDS = ("phone", "birth_date")


class PatientService:
    """Service for patient operations."""

    async def list_patients(self, db: AsyncSession) -> list[dict]:
        """List patients ordered by name."""
        result = await db.execute(select(patients).order_by(patients.c.name))
        return [dict(row) for row in result.mappings().all()]

    async def get_patient(self, db: AsyncSession, patient_id: int) -> dict:
        """
        Get patient by ID.

        Raises:
            NotFoundException: If patient not found
        """
        result = await db.execute(select(patients).where(patients.c.id == patient_id))
        patient = result.mappings().first()

        if not patient:
            raise NotFoundException("Patient not found")

        return dict(patient)

    async def _insert(self, db: AsyncSession, values: dict) -> dict:
        now = utc_now()
        query = (
            patients.insert().values(**values, created_at=now, updated_at=now).returning(patients)
        )
        result = await db.execute(query)
        await db.commit()
        return dict(result.mappings().one())

    async def create_patient(self, db: AsyncSession, data: PatientCreate, created_by: int) -> dict:
        """Register a patient with the full record."""
        patient = await self._insert(
            db,
            {
                **data.model_dump(),
                "gender": data.gender.value,
                "created_by": created_by,
                "needs_completion": False,
            },
        )
        logger.info("patient_created", patient_id=patient["id"], created_by=created_by)
        return patient

    async def quick_create_patient(
        self,
        db: AsyncSession,
        data: PatientQuickCreate,
        created_by: int,
    ) -> dict:
        """
        Register a walk-in patient with only a name.

        The record is flagged ``needs_completion`` until an update fills the
        phone and birth date.
        """
        patient = await self._insert(
            db,
            {
                "name": data.name.strip(),
                "phone": data.phone,
                "gender": Gender.OTHER.value,
                "observations": QUICK_REGISTRATION_NOTE,
                "created_by": created_by,
                "needs_completion": True,
            },
        )
        logger.info("patient_quick_created", patient_id=patient["id"], created_by=created_by)
        return patient

    async def update_patient(self, db: AsyncSession, patient_id: int, data: PatientUpdate) -> dict:
        """
        Update a patient.

        Raises:
            NotFoundException: If patient not found
        """
        patient = await self.get_patient(db, patient_id)
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data:
            return patient

        if "gender" in update_data:
            update_data["gender"] = data.gender.value

        merged = {**patient, **update_data}
        if patient["needs_completion"] and all(merged[field] for field in _COMPLETION_FIELDS):
            update_data["needs_completion"] = False

        query = (
            update(patients)
            .where(patients.c.id == patient_id)
            .values(**update_data, updated_at=utc_now())
            .returning(patients)
        )
        result = await db.execute(query)
        await db.commit()

        return dict(result.mappings().one())
