"""Events emitted along the convention lifecycle."""

from typing import Annotated, Literal, assert_never

from pydantic import Field

from immersion.domain.agency.model.value import AgencyId
from immersion.domain.auth.model.credential import (
    ConnectedUserCredential,
    ConventionMagicLinkCredential,
    Credential,
)
from immersion.domain.auth.model.role import Role
from immersion.domain.auth.model.value import UserId
from immersion.domain.convention.model.aggregate import Convention
from immersion.domain.shared.event import Event
from immersion.domain.shared.model.value import ValueObject


class ConnectedUserTrigger(ValueObject):
    kind: Literal["connected-user"] = "connected-user"
    user_id: UserId


class MagicLinkTrigger(ValueObject):
    kind: Literal["convention-magic-link"] = "convention-magic-link"
    role: Role


TriggeredBy = Annotated[ConnectedUserTrigger | MagicLinkTrigger, Field(discriminator="kind")]


def triggered_by(credential: Credential) -> ConnectedUserTrigger | MagicLinkTrigger:
    match credential:
        case ConnectedUserCredential(user_id=user_id):
            return ConnectedUserTrigger(user_id=user_id)
        case ConventionMagicLinkCredential(role=role):
            return MagicLinkTrigger(role=role)
        case _:
            assert_never(credential)


class ConventionEvent(Event):
    convention: Convention
    triggered_by: TriggeredBy | None = None


class ConventionPartiallySigned(ConventionEvent):
    """A signatory signed, others still have to."""


class ConventionFullySigned(ConventionEvent):
    """Every present signatory signed; the agency can review."""


class ConventionAcceptedByCounsellor(ConventionEvent): ...


class ConventionAcceptedByValidator(ConventionEvent): ...


class ConventionRejected(ConventionEvent): ...


class ConventionCancelled(ConventionEvent): ...


class ConventionDeprecated(ConventionEvent): ...


class ConventionRequiresModification(ConventionEvent):
    justification: str
    requester_role: Role
    modifier_role: Role


class ConventionSubmittedAfterModification(ConventionEvent):
    """Content was edited before signature; every signature was reset."""


class ConventionTransferredToAgency(ConventionEvent):
    agency_id: AgencyId
    previous_agency_id: AgencyId
    justification: str


class ConventionSignatureLinkManuallySent(ConventionEvent):
    recipient_role: Role
    transport: Literal["sms"] = "sms"


class AssessmentReminderManuallySent(ConventionEvent):
    recipient_role: Role = Role.ESTABLISHMENT_TUTOR
    transport: Literal["sms"] = "sms"
