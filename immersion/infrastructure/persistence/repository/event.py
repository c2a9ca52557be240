"""SQLAlchemy adapter implementing EventRepository."""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from immersion.domain.shared.event import Event, EventId
from immersion.domain.shared.port.event_repository import EventRepository
from immersion.infrastructure.persistence.tables import events_table

logger = logging.getLogger(__name__)


class SQLAlchemyEventRepository(EventRepository):
    """Append-only event log sharing the unit-of-work session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save(self, event: Event) -> None:
        await self._session.execute(
            insert(events_table).values(
                id=str(event.id),
                event_type=type(event).__name__,
                payload=event.model_dump(mode="json"),
                created_at=event.created_at,
            )
        )

    async def get(self, event_id: EventId) -> Event | None:
        stmt = select(events_table.c.event_type, events_table.c.payload).where(
            events_table.c.id == str(event_id)
        )
        result = await self._session.execute(stmt)
        row = result.first()
        if row is None:
            return None

        event_type, payload = row
        return self._deserialize(event_type, payload)

    async def fetch_pending(self, limit: int, max_attempts: int) -> list[Event]:
        stmt = (
            select(events_table.c.event_type, events_table.c.payload)
            .where(events_table.c.published_at.is_(None))
            .where(events_table.c.attempts < max_attempts)
            .order_by(events_table.c.created_at)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        events = [self._deserialize(event_type, payload) for event_type, payload in result.all()]
        return [event for event in events if event is not None]

    async def mark_delivered(self, event_id: EventId, delivered_at: datetime) -> None:
        await self._session.execute(
            update(events_table)
            .where(events_table.c.id == str(event_id))
            .values(published_at=delivered_at)
        )

    async def mark_failed(self, event_id: EventId, error: str) -> None:
        await self._session.execute(
            update(events_table)
            .where(events_table.c.id == str(event_id))
            .values(attempts=events_table.c.attempts + 1, last_error=error)
        )

    def _deserialize(self, event_type: str, payload: dict[str, Any]) -> Event | None:
        event_cls = Event.resolve(event_type)
        if event_cls is None:
            logger.warning("Unknown event type in log: %s", event_type)
            return None
        return event_cls.model_validate(payload)
