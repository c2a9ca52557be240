"""Dependency injection provider for the event system."""

import logging
from typing import Any, NewType

from dishka import AsyncContainer, provide

from immersion.config import Config
from immersion.domain.convention.handler.notify_signatories import (
    NotifySignatoriesThatConventionNeedsSignature,
)
from immersion.domain.shared.event import EventHandler
from immersion.domain.shared.outbox import Outbox
from immersion.domain.shared.port.event_repository import EventRepository
from immersion.infrastructure.event.relay import EventRelay
from immersion.util.di.base import Provider
from immersion.util.di.scope import Scope

logger = logging.getLogger(__name__)

HandlerTypes = NewType("HandlerTypes", list[type[EventHandler[Any]]])

# Every event handler the relay delivers to
HANDLERS: HandlerTypes = HandlerTypes(
    [
        NotifySignatoriesThatConventionNeedsSignature,
    ]
)


class EventProvider(Provider):
    """Outbox and handlers are UOW-scoped; the relay is an APP-scoped singleton."""

    @provide(scope=Scope.UOW)
    def get_outbox(self, repo: EventRepository) -> Outbox:
        return Outbox(repo)

    for _handler_type in HANDLERS:
        locals()[_handler_type.__name__] = provide(_handler_type, scope=Scope.UOW)

    @provide(scope=Scope.APP)
    def get_handler_types(self) -> HandlerTypes:
        return HANDLERS

    @provide(scope=Scope.APP)
    def get_event_relay(
        self, container: AsyncContainer, handler_types: HandlerTypes, config: Config
    ) -> EventRelay:
        logger.info("Event relay subscriptions: %s", [h.__name__ for h in handler_types])
        return EventRelay(container, handler_types, config.events)
