"""EventRepository port - append-only persistence for domain events."""

from abc import abstractmethod
from datetime import datetime
from typing import Protocol

from immersion.domain.shared.event import Event, EventId
from immersion.domain.shared.port import Port


class EventRepository(Port, Protocol):
    """Repository for domain events.

    Events are written in the same unit of work as the state change that
    produced them and relayed to handlers later.
    """

    @abstractmethod
    async def save(self, event: Event) -> None:
        """Append an event to the log."""
        ...

    @abstractmethod
    async def get(self, event_id: EventId) -> Event | None:
        """Get an event by ID."""
        ...

    @abstractmethod
    async def fetch_pending(self, limit: int, max_attempts: int) -> list[Event]:
        """Oldest undelivered events that have not exhausted their attempts."""
        ...

    @abstractmethod
    async def mark_delivered(self, event_id: EventId, delivered_at: datetime) -> None: ...

    @abstractmethod
    async def mark_failed(self, event_id: EventId, error: str) -> None:
        """Record a failed delivery attempt."""
        ...
