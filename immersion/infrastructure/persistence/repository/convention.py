from datetime import datetime
from typing import Any

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from immersion.domain.convention.model.aggregate import (
    AgencyRefersTo,
    Convention,
    ConventionRead,
)
from immersion.domain.convention.model.value import ConventionId
from immersion.domain.convention.port.repository import (
    ConventionQueries,
    ConventionRepository,
    UpdateOutcome,
)
from immersion.infrastructure.persistence.database import as_utc
from immersion.infrastructure.persistence.tables import agencies_table, conventions_table

_CONTENT_FIELDS = ("immersion_address", "immersion_appellation", "immersion_objective", "schedule")


def _convention_to_row(convention: Convention) -> dict[str, Any]:
    return {
        "id": convention.id,
        "status": convention.status.value,
        "status_justification": convention.status_justification,
        "agency_id": convention.agency_id,
        "signatories": convention.signatories.model_dump(mode="json"),
        "establishment_tutor": convention.establishment_tutor.model_dump(mode="json"),
        "validators": convention.validators.model_dump(mode="json")
        if convention.validators
        else None,
        "date_submission": convention.date_submission,
        "date_start": convention.date_start,
        "date_end": convention.date_end,
        "date_validation": convention.date_validation,
        "date_approval": convention.date_approval,
        "internship_kind": convention.internship_kind.value,
        "siret": convention.siret,
        "business_name": convention.business_name,
        "content": convention.model_dump(mode="json", include=set(_CONTENT_FIELDS)),
        "updated_at": convention.updated_at,
    }


def _row_to_fields(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": row["id"],
        "status": row["status"],
        "status_justification": row["status_justification"],
        "agency_id": row["agency_id"],
        "signatories": row["signatories"],
        "establishment_tutor": row["establishment_tutor"],
        "validators": row["validators"],
        "date_submission": as_utc(row["date_submission"]),
        "date_start": row["date_start"],
        "date_end": row["date_end"],
        "date_validation": as_utc(row["date_validation"]),
        "date_approval": as_utc(row["date_approval"]),
        "internship_kind": row["internship_kind"],
        "siret": row["siret"],
        "business_name": row["business_name"],
        "updated_at": as_utc(row["updated_at"]),
        **(row["content"] or {}),
    }


def _row_to_convention(row: dict[str, Any]) -> Convention:
    return Convention.model_validate(_row_to_fields(row))


class PostgresConventionRepository(ConventionRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, convention_id: ConventionId) -> Convention | None:
        stmt = select(conventions_table).where(conventions_table.c.id == convention_id)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_convention(dict(row)) if row else None

    async def save(self, convention: Convention) -> None:
        await self.session.execute(
            insert(conventions_table).values(**_convention_to_row(convention))
        )
        await self.session.flush()

    async def update(
        self, convention: Convention, *, expected_updated_at: datetime
    ) -> UpdateOutcome:
        stmt = (
            update(conventions_table)
            .where(conventions_table.c.id == convention.id)
            .where(conventions_table.c.updated_at == expected_updated_at)
            .values(**_convention_to_row(convention))
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 1:
            await self.session.flush()
            return UpdateOutcome.UPDATED

        exists = await self.session.execute(
            select(conventions_table.c.id).where(conventions_table.c.id == convention.id)
        )
        return UpdateOutcome.CONFLICT if exists.first() else UpdateOutcome.NOT_FOUND


class PostgresConventionQueries(ConventionQueries):
    """Conventions joined with their agency and the agency it refers to."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_convention_by_id(self, convention_id: ConventionId) -> ConventionRead | None:
        agency = agencies_table.alias("agency")
        referred = agencies_table.alias("referred_agency")
        stmt = (
            select(
                conventions_table,
                agency.c.name.label("agency_name"),
                agency.c.department.label("agency_department"),
                agency.c.kind.label("agency_kind"),
                referred.c.id.label("referred_agency_id"),
                referred.c.name.label("referred_agency_name"),
                referred.c.kind.label("referred_agency_kind"),
            )
            .select_from(
                conventions_table.join(agency, agency.c.id == conventions_table.c.agency_id)
                .outerjoin(referred, referred.c.id == agency.c.refers_to_agency_id)
            )
            .where(conventions_table.c.id == convention_id)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        if row is None:
            return None

        refers_to = (
            AgencyRefersTo(
                id=row["referred_agency_id"],
                name=row["referred_agency_name"],
                kind=row["referred_agency_kind"],
            )
            if row["referred_agency_id"]
            else None
        )
        return ConventionRead.model_validate(
            {
                **_row_to_fields(dict(row)),
                "agency_name": row["agency_name"],
                "agency_department": row["agency_department"],
                "agency_kind": row["agency_kind"],
                "agency_refers_to": refers_to,
            }
        )
