"""Agency decisions on a convention: status changes and transfers."""

import logging
from datetime import datetime

from pydantic import BaseModel

from immersion.domain.agency.model.aggregate import Agency
from immersion.domain.agency.model.value import AgencyId
from immersion.domain.agency.port.repository import AgencyRepository
from immersion.domain.auth.model.credential import Credential
from immersion.domain.auth.model.role import Role
from immersion.domain.auth.service.role import RoleResolver
from immersion.domain.convention.event.events import ConventionTransferredToAgency, triggered_by
from immersion.domain.convention.model.aggregate import Convention, ConventionRead
from immersion.domain.convention.model.status import apply_status_change
from immersion.domain.convention.model.transition import assert_transfer_allowed
from immersion.domain.convention.model.value import (
    SIGNATURE_STATUSES,
    ConventionId,
    ConventionStatus,
)
from immersion.domain.convention.port.repository import AssessmentRepository, ConventionQueries
from immersion.domain.convention.service.state_machine import ConventionStateMachine, persist
from immersion.domain.shared.error import AuthorizationError, NotFoundError, ValidationError
from immersion.domain.shared.outbox import Outbox
from immersion.domain.shared.service import Service

logger = logging.getLogger(__name__)


class StatusChange(BaseModel):
    status: ConventionStatus
    status_justification: str | None = None
    first_name: str | None = None  # name of the reviewing counsellor/validator
    last_name: str | None = None
    modifier_role: Role | None = None  # who must edit the convention, for DRAFT


class ConventionStatusService(Service):
    convention_queries: ConventionQueries
    agency_repo: AgencyRepository
    assessment_repo: AssessmentRepository
    role_resolver: RoleResolver
    state_machine: ConventionStateMachine
    outbox: Outbox

    async def _get_convention(self, convention_id: ConventionId) -> ConventionRead:
        convention = await self.convention_queries.get_convention_by_id(convention_id)
        if convention is None:
            raise NotFoundError(
                f"Convention not found: {convention_id}", code="convention_not_found"
            )
        return convention

    async def _get_agency(self, agency_id: AgencyId) -> Agency:
        agency = await self.agency_repo.get_by_id(agency_id)
        if agency is None:
            raise NotFoundError(f"Agency not found: {agency_id}", code="agency_not_found")
        return agency

    async def update_status(
        self,
        convention_id: ConventionId,
        change: StatusChange,
        credential: Credential,
        now: datetime,
    ) -> Convention:
        if change.status in SIGNATURE_STATUSES:
            raise ValidationError(
                f"Status {change.status} is only reached by signing",
                field="status",
                code="status_reached_by_signing",
            )

        convention = await self._get_convention(convention_id)
        await self._get_agency(convention.agency_id)
        roles = await self.role_resolver.resolve_roles(credential, convention)
        has_assessment = (
            await self.assessment_repo.get_by_convention_id(convention_id)
        ) is not None

        acting_role = self.state_machine.assert_transition_allowed(
            change.status, roles, convention, has_assessment
        )

        event_fields = {}
        if change.status == ConventionStatus.DRAFT:
            if change.modifier_role is None:
                raise ValidationError(
                    "The role expected to edit the convention is required",
                    field="modifier_role",
                    code="missing_modifier_role",
                )
            event_fields = {
                "justification": change.status_justification,
                "requester_role": acting_role,
                "modifier_role": change.modifier_role,
            }

        updated = apply_status_change(
            convention,
            change.status,
            now,
            justification=change.status_justification,
            first_name=change.first_name,
            last_name=change.last_name,
        )
        await self.state_machine.commit(
            updated,
            expected_updated_at=convention.updated_at,
            triggered_by=triggered_by(credential),
            **event_fields,
        )
        return updated

    async def transfer_to_agency(
        self,
        convention_id: ConventionId,
        agency_id: AgencyId,
        justification: str,
        credential: Credential,
        now: datetime,
    ) -> Convention:
        if not justification.strip():
            raise ValidationError(
                "A justification is required to transfer a convention",
                field="justification",
                code="missing_transfer_justification",
            )

        convention = await self._get_convention(convention_id)
        assert_transfer_allowed(convention)
        target_agency = await self._get_agency(agency_id)
        source_agency = await self._get_agency(convention.agency_id)

        roles = await self.role_resolver.assert_agency_actor(
            credential,
            convention,
            source_agency,
            denied_code="transfer_not_authorized_for_role",
        )
        if source_agency.refers_to_agency_id is not None and set(roles) == {Role.VALIDATOR}:
            raise AuthorizationError(
                f"Validators of agency {source_agency.id} cannot transfer its conventions: "
                f"it delegates validation to agency {source_agency.refers_to_agency_id}",
                code="validator_of_agency_refers_to_not_allowed",
            )

        updated = convention.to_convention().model_copy(
            update={"agency_id": target_agency.id, "updated_at": now}
        )
        await persist(
            self.state_machine.convention_repo,
            updated,
            expected_updated_at=convention.updated_at,
        )
        await self.outbox.append(
            ConventionTransferredToAgency(
                convention=updated,
                triggered_by=triggered_by(credential),
                agency_id=target_agency.id,
                previous_agency_id=convention.agency_id,
                justification=justification,
                created_at=now,
            )
        )
        logger.info(
            "Convention %s transferred from agency %s to %s",
            convention_id,
            convention.agency_id,
            target_agency.id,
        )
        return updated
