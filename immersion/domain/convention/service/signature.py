import logging
from datetime import datetime

from pydantic import BaseModel

from immersion.domain.auth.model.credential import Credential
from immersion.domain.auth.model.role import SIGNATORY_ROLES, Role
from immersion.domain.auth.service.role import RoleResolver
from immersion.domain.convention.event.events import triggered_by
from immersion.domain.convention.model.aggregate import Convention
from immersion.domain.convention.model.signature import sign_with_role
from immersion.domain.convention.model.value import ConventionId
from immersion.domain.convention.port.repository import ConventionQueries
from immersion.domain.convention.service.state_machine import ConventionStateMachine
from immersion.domain.shared.error import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from immersion.domain.shared.model.phone import is_valid_mobile_phone
from immersion.domain.shared.service import Service

logger = logging.getLogger(__name__)


class SignResult(BaseModel):
    role: Role
    convention: Convention


class SignatureService(Service):
    convention_queries: ConventionQueries
    role_resolver: RoleResolver
    state_machine: ConventionStateMachine

    async def sign(
        self, convention_id: ConventionId, credential: Credential, now: datetime
    ) -> SignResult:
        """Record the caller's signature on a convention.

        Every guard runs before anything is written: a rejected signature leaves
        the stored convention untouched.
        """
        convention = await self.convention_queries.get_convention_by_id(convention_id)
        if convention is None:
            raise NotFoundError(
                f"Convention not found: {convention_id}", code="convention_not_found"
            )

        role = await self.role_resolver.resolve_signatory_role(credential, convention)
        if role not in SIGNATORY_ROLES:
            raise AuthorizationError(
                f"Role {role} is not allowed to sign convention {convention_id}",
                code="role_not_allowed_to_sign",
            )

        signatory = convention.signatories.for_role(role)
        if signatory is None:
            raise NotFoundError(
                f"Convention {convention_id} has no {role}", code="missing_actor"
            )
        if signatory.phone and not is_valid_mobile_phone(signatory.phone):
            raise ValidationError(
                f"Phone number of {role} is not a valid mobile number",
                field="phone",
                code="invalid_mobile_phone_number",
            )
        if signatory.has_signed:
            raise ConflictError(
                f"{role} already signed convention {convention_id}",
                code="signatory_already_signed",
            )

        signed = sign_with_role(convention, role, now)
        self.state_machine.assert_transition_allowed(
            signed.status, [role], convention, has_assessment=False
        )

        updated = signed.to_convention().model_copy(update={"updated_at": now})
        await self.state_machine.commit(
            updated,
            expected_updated_at=convention.updated_at,
            triggered_by=triggered_by(credential),
        )
        logger.info("Convention %s signed by %s", convention_id, role)
        return SignResult(role=role, convention=updated)
