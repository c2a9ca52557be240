from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from immersion.domain.convention.model.assessment import Assessment
from immersion.domain.convention.model.value import ConventionId
from immersion.domain.convention.port.repository import AssessmentRepository
from immersion.infrastructure.persistence.database import as_utc
from immersion.infrastructure.persistence.tables import assessments_table


class PostgresAssessmentRepository(AssessmentRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_convention_id(self, convention_id: ConventionId) -> Assessment | None:
        result = await self.session.execute(
            select(assessments_table).where(assessments_table.c.convention_id == convention_id)
        )
        row = result.mappings().first()
        if row is None:
            return None
        return Assessment(
            convention_id=row["convention_id"],
            status=row["status"],
            created_at=as_utc(row["created_at"]),
        )

    async def save(self, assessment: Assessment) -> None:
        await self.session.execute(
            insert(assessments_table).values(
                convention_id=assessment.convention_id,
                status=assessment.status.value,
                created_at=assessment.created_at,
            )
        )
        await self.session.flush()
