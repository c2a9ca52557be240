"""Content edits of a convention before it is signed."""

import logging
from datetime import datetime
from typing import assert_never

from immersion.domain.auth.model.credential import (
    ConnectedUserCredential,
    ConventionMagicLinkCredential,
    Credential,
)
from immersion.domain.auth.model.role import SIGNATORY_ROLES, Role
from immersion.domain.auth.service.role import RoleResolver, assert_convention_matches
from immersion.domain.convention.event.events import (
    ConventionSubmittedAfterModification,
    triggered_by,
)
from immersion.domain.convention.model.aggregate import Convention
from immersion.domain.convention.model.value import ConventionStatus
from immersion.domain.convention.port.repository import ConventionQueries, ConventionRepository
from immersion.domain.convention.service.state_machine import persist
from immersion.domain.shared.error import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from immersion.domain.shared.outbox import Outbox
from immersion.domain.shared.service import Service

logger = logging.getLogger(__name__)

EDITOR_ROLES = SIGNATORY_ROLES | {Role.COUNSELLOR, Role.VALIDATOR, Role.BACK_OFFICE}

EDITABLE_STATUSES = frozenset(
    {
        ConventionStatus.DRAFT,
        ConventionStatus.READY_TO_SIGN,
        ConventionStatus.PARTIALLY_SIGNED,
        ConventionStatus.IN_REVIEW,
        ConventionStatus.ACCEPTED_BY_COUNSELLOR,
    }
)


class ConventionService(Service):
    convention_repo: ConventionRepository
    convention_queries: ConventionQueries
    role_resolver: RoleResolver
    outbox: Outbox

    async def update(
        self, convention: Convention, credential: Credential, now: datetime
    ) -> Convention:
        """Replace the content of a convention and send it back to signature.

        ``convention.updated_at`` must be the value the editor loaded: an edit
        based on a stale copy is refused.
        """
        if isinstance(credential, ConventionMagicLinkCredential):
            assert_convention_matches(credential, convention.id)
            if credential.role not in EDITOR_ROLES:
                raise AuthorizationError(
                    f"Role {credential.role} cannot edit convention {convention.id}",
                    code="update_forbidden",
                )

        stored = await self.convention_queries.get_convention_by_id(convention.id)
        if stored is None:
            raise NotFoundError(
                f"Convention not found: {convention.id}", code="convention_not_found"
            )

        match credential:
            case ConventionMagicLinkCredential():
                pass
            case ConnectedUserCredential():
                roles = await self.role_resolver.resolve_roles(credential, stored)
                if not EDITOR_ROLES.intersection(roles):
                    raise AuthorizationError(
                        f"User {credential.user_id} cannot edit convention {convention.id}",
                        code="not_enough_rights_on_agency",
                    )
            case _:
                assert_never(credential)

        if stored.status not in EDITABLE_STATUSES:
            raise InvalidStateError(
                f"Convention {convention.id} cannot be edited with status {stored.status}",
                code="update_bad_status_in_repo",
            )
        if convention.status != ConventionStatus.READY_TO_SIGN:
            raise ValidationError(
                f"An edited convention must be {ConventionStatus.READY_TO_SIGN}, "
                f"got {convention.status}",
                field="status",
                code="update_bad_status_in_params",
            )
        if convention.updated_at != stored.updated_at:
            raise ConflictError(
                f"Convention {convention.id} was modified while being edited",
                code="convention_updated_concurrently",
            )

        updated = convention.model_copy(
            update={
                "agency_id": stored.agency_id,
                "signatories": convention.signatories.without_signatures(),
                "status_justification": None,
                "date_validation": None,
                "date_approval": None,
                "validators": None,
                "updated_at": now,
            }
        )
        await persist(self.convention_repo, updated, expected_updated_at=stored.updated_at)
        await self.outbox.append(
            ConventionSubmittedAfterModification(
                convention=updated,
                triggered_by=triggered_by(credential),
                created_at=now,
            )
        )
        logger.info("Convention %s edited, signatures reset", convention.id)
        return updated
