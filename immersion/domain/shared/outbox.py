"""Outbox - domain service for reliable event delivery."""

import logging
from datetime import datetime

from immersion.domain.shared.event import Event, EventId
from immersion.domain.shared.port.event_repository import EventRepository
from immersion.domain.shared.service import Service

logger = logging.getLogger(__name__)


class Outbox(Service):
    """Queues domain events through the transactional outbox pattern.

    append() writes the event through the same session as the aggregate change,
    so an event exists if and only if the state change was committed. The relay
    later reads pending events back and records each delivery.
    """

    _repo: EventRepository

    async def append(self, event: Event) -> None:
        """Add an event to the outbox for delivery."""
        logger.debug("Queue event %s id=%s", type(event).__name__, event.id)
        await self._repo.save(event)

    async def pending(self, limit: int, max_attempts: int) -> list[Event]:
        return await self._repo.fetch_pending(limit, max_attempts)

    async def mark_delivered(self, event_id: EventId, delivered_at: datetime) -> None:
        await self._repo.mark_delivered(event_id, delivered_at)

    async def mark_failed(self, event_id: EventId, error: str) -> None:
        await self._repo.mark_failed(event_id, error)
