"""Persisting status transitions and emitting their events."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any

from immersion.domain.auth.model.role import Role
from immersion.domain.convention.event.events import (
    ConventionAcceptedByCounsellor,
    ConventionAcceptedByValidator,
    ConventionCancelled,
    ConventionDeprecated,
    ConventionEvent,
    ConventionFullySigned,
    ConventionPartiallySigned,
    ConventionRejected,
    ConventionRequiresModification,
    TriggeredBy,
)
from immersion.domain.convention.model.aggregate import Convention, ConventionRead
from immersion.domain.convention.model.transition import TransitionPolicy
from immersion.domain.convention.model.value import ConventionStatus
from immersion.domain.convention.port.repository import ConventionRepository, UpdateOutcome
from immersion.domain.shared.error import ConflictError, NotFoundError
from immersion.domain.shared.outbox import Outbox
from immersion.domain.shared.service import Service

logger = logging.getLogger(__name__)

STATUS_EVENTS: Mapping[ConventionStatus, type[ConventionEvent] | None] = MappingProxyType(
    {
        ConventionStatus.READY_TO_SIGN: None,
        ConventionStatus.PARTIALLY_SIGNED: ConventionPartiallySigned,
        ConventionStatus.IN_REVIEW: ConventionFullySigned,
        ConventionStatus.ACCEPTED_BY_COUNSELLOR: ConventionAcceptedByCounsellor,
        ConventionStatus.ACCEPTED_BY_VALIDATOR: ConventionAcceptedByValidator,
        ConventionStatus.REJECTED: ConventionRejected,
        ConventionStatus.CANCELLED: ConventionCancelled,
        ConventionStatus.DEPRECATED: ConventionDeprecated,
        ConventionStatus.DRAFT: ConventionRequiresModification,
    }
)


@dataclass(frozen=True)
class StatusEventTable:
    """Which event announces that a convention reached a status."""

    events: Mapping[ConventionStatus, type[ConventionEvent] | None] = field(
        default_factory=lambda: STATUS_EVENTS
    )

    def event_for(self, status: ConventionStatus) -> type[ConventionEvent] | None:
        return self.events.get(status)


async def persist(
    repo: ConventionRepository, convention: Convention, *, expected_updated_at: datetime
) -> None:
    """Write ``convention`` unless someone else changed it since ``expected_updated_at``."""
    outcome = await repo.update(convention, expected_updated_at=expected_updated_at)
    match outcome:
        case UpdateOutcome.UPDATED:
            return
        case UpdateOutcome.NOT_FOUND:
            raise NotFoundError(
                f"Convention not found: {convention.id}", code="convention_not_found"
            )
        case UpdateOutcome.CONFLICT:
            raise ConflictError(
                f"Convention {convention.id} was modified by someone else, reload and retry",
                code="convention_updated_concurrently",
            )


class ConventionStateMachine(Service):
    """Applies the transition policy, persists the result and queues the matching event.

    Both signature completion and explicit agency decisions go through here so
    a status change and its event are always written in the same unit of work.
    """

    convention_repo: ConventionRepository
    outbox: Outbox
    policy: TransitionPolicy
    status_events: StatusEventTable

    def assert_transition_allowed(
        self,
        target_status: ConventionStatus,
        roles: Iterable[Role],
        convention: ConventionRead,
        has_assessment: bool,
    ) -> Role:
        """Check the transition and return the role the caller acts with."""
        roles = list(roles)
        self.policy.assert_allowed(target_status, roles, convention, has_assessment)
        return self.policy.acting_role(target_status, roles)

    async def commit(
        self,
        convention: Convention,
        *,
        expected_updated_at: datetime,
        triggered_by: TriggeredBy | None,
        **event_fields: Any,
    ) -> ConventionEvent | None:
        await persist(self.convention_repo, convention, expected_updated_at=expected_updated_at)

        event_type = self.status_events.event_for(convention.status)
        if event_type is None:
            logger.info("Convention %s is now %s", convention.id, convention.status)
            return None

        event = event_type(
            convention=convention,
            triggered_by=triggered_by,
            created_at=convention.updated_at,
            **event_fields,
        )
        await self.outbox.append(event)
        logger.info(
            "Convention %s is now %s, %s queued",
            convention.id,
            convention.status,
            event_type.__name__,
        )
        return event
