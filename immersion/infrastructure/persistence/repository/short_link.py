from datetime import datetime

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from immersion.domain.link.model.short_link import ShortLink
from immersion.domain.link.model.value import ShortLinkId
from immersion.domain.link.port.short_link import ShortLinkRepository
from immersion.infrastructure.persistence.database import as_utc
from immersion.infrastructure.persistence.tables import short_links_table


class PostgresShortLinkRepository(ShortLinkRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def save(self, short_link: ShortLink) -> None:
        await self.session.execute(
            insert(short_links_table).values(
                id=short_link.id,
                url=short_link.url,
                single_use=short_link.single_use,
                used_at=short_link.used_at,
                created_at=short_link.created_at,
            )
        )
        await self.session.flush()

    async def get(self, short_link_id: ShortLinkId) -> ShortLink | None:
        result = await self.session.execute(
            select(short_links_table).where(short_links_table.c.id == short_link_id)
        )
        row = result.mappings().first()
        if row is None:
            return None
        return ShortLink(
            id=ShortLinkId(row["id"]),
            url=row["url"],
            single_use=row["single_use"],
            used_at=as_utc(row["used_at"]),
            created_at=as_utc(row["created_at"]),
        )

    async def mark_used(self, short_link_id: ShortLinkId, used_at: datetime) -> bool:
        # Conditional update: two concurrent resolutions cannot both consume the link
        result = await self.session.execute(
            update(short_links_table)
            .where(short_links_table.c.id == short_link_id)
            .where(short_links_table.c.used_at.is_(None))
            .values(used_at=used_at)
        )
        await self.session.flush()
        return result.rowcount == 1
