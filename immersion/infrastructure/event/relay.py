"""Outbox relay: delivers committed domain events to their handlers."""

import asyncio
import logging
from typing import Any

from dishka import AsyncContainer

from immersion.config import EventRelayConfig
from immersion.domain.shared.event import Event, EventHandler
from immersion.domain.shared.outbox import Outbox
from immersion.domain.shared.port.clock import Clock
from immersion.util.di.scope import Scope

logger = logging.getLogger(__name__)


class EventRelay:
    """Polls the outbox and hands each pending event to the handlers subscribed to its type.

    Each event is delivered in its own unit of work: handler writes and the
    delivery mark commit together. A failed delivery is recorded in a separate
    unit of work and retried on a later poll until ``max_attempts`` is reached.
    """

    def __init__(
        self,
        container: AsyncContainer,
        handler_types: list[type[EventHandler[Any]]],
        config: EventRelayConfig,
    ) -> None:
        self._container = container
        self._config = config
        self._subscriptions: dict[type[Event], list[type[EventHandler[Any]]]] = {}
        for handler_type in handler_types:
            self._subscriptions.setdefault(handler_type.__event_type__, []).append(handler_type)
        self._shutdown = False
        self._task: asyncio.Task | None = None

    def start(self) -> asyncio.Task:
        self._shutdown = False
        self._task = asyncio.create_task(self._run(), name="event-relay")
        logger.info("Event relay started: %d event types", len(self._subscriptions))
        return self._task

    async def stop(self) -> None:
        self._shutdown = True
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Event relay stopped")

    async def _run(self) -> None:
        """Poll until stopped. A failed poll is logged and retried after the poll interval."""
        try:
            while not self._shutdown:
                try:
                    delivered = await self.poll_once()
                except Exception:
                    logger.exception("Event relay poll failed, retrying")
                    delivered = 0
                if not delivered:
                    await asyncio.sleep(self._config.poll_interval_seconds)
        except asyncio.CancelledError:
            logger.info("Event relay cancelled")
            raise

    async def poll_once(self) -> int:
        """Deliver one batch of pending events. Returns how many were attempted."""
        async with self._container(scope=Scope.UOW) as scope:
            outbox = await scope.get(Outbox)
            events = await outbox.pending(self._config.batch_size, self._config.max_attempts)

        for event in events:
            await self._deliver(event)
        return len(events)

    async def _deliver(self, event: Event) -> None:
        handler_types = self._subscriptions.get(type(event), [])
        try:
            async with self._container(scope=Scope.UOW) as scope:
                for handler_type in handler_types:
                    handler = await scope.get(handler_type)
                    await handler.handle(event)
                outbox = await scope.get(Outbox)
                clock = await scope.get(Clock)
                await outbox.mark_delivered(event.id, clock.now())
        except Exception as e:
            logger.exception("Delivery of %s id=%s failed", type(event).__name__, event.id)
            async with self._container(scope=Scope.UOW) as scope:
                outbox = await scope.get(Outbox)
                await outbox.mark_failed(event.id, f"{type(e).__name__}: {e}")
