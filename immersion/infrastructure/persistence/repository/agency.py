from typing import Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from immersion.domain.agency.model.aggregate import Agency, AgencyUserRight
from immersion.domain.agency.model.value import AgencyId
from immersion.domain.agency.port.repository import AgencyRepository
from immersion.domain.auth.model.user import AgencyRight
from immersion.domain.auth.model.value import UserId
from immersion.infrastructure.persistence.tables import agencies_table, users_agencies_table


def _agency_to_row(agency: Agency) -> dict[str, Any]:
    return {
        "id": agency.id,
        "name": agency.name,
        "kind": agency.kind.value,
        "department": agency.department,
        "status": agency.status.value,
        "refers_to_agency_id": agency.refers_to_agency_id,
    }


class PostgresAgencyRepository(AgencyRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, agency_id: AgencyId) -> Agency | None:
        result = await self.session.execute(
            select(agencies_table).where(agencies_table.c.id == agency_id)
        )
        row = result.mappings().first()
        if row is None:
            return None

        rights_result = await self.session.execute(
            select(users_agencies_table).where(users_agencies_table.c.agency_id == agency_id)
        )
        users_rights = {
            UserId(r["user_id"]): AgencyUserRight(
                roles=r["roles"], is_notified_by_email=r["is_notified_by_email"]
            )
            for r in rights_result.mappings().all()
        }
        return Agency.model_validate({**dict(row), "users_rights": users_rights})

    async def get_by_ids(self, agency_ids: list[AgencyId]) -> list[Agency]:
        agencies = [await self.get_by_id(agency_id) for agency_id in agency_ids]
        return [agency for agency in agencies if agency is not None]

    async def get_agency_rights_by_user_id(self, user_id: UserId) -> list[AgencyRight]:
        result = await self.session.execute(
            select(users_agencies_table).where(users_agencies_table.c.user_id == user_id)
        )
        return [
            AgencyRight(
                agency_id=r["agency_id"],
                roles=r["roles"],
                is_notified_by_email=r["is_notified_by_email"],
            )
            for r in result.mappings().all()
        ]

    async def save(self, agency: Agency) -> None:
        row = _agency_to_row(agency)
        exists = await self.session.execute(
            select(agencies_table.c.id).where(agencies_table.c.id == agency.id)
        )
        if exists.first():
            await self.session.execute(
                update(agencies_table).where(agencies_table.c.id == agency.id).values(**row)
            )
        else:
            await self.session.execute(insert(agencies_table).values(**row))

        await self.session.execute(
            delete(users_agencies_table).where(users_agencies_table.c.agency_id == agency.id)
        )
        for user_id, right in agency.users_rights.items():
            await self.session.execute(
                insert(users_agencies_table).values(
                    user_id=user_id,
                    agency_id=agency.id,
                    roles=[role.value for role in right.roles],
                    is_notified_by_email=right.is_notified_by_email,
                )
            )
        await self.session.flush()
