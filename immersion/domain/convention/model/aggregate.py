"""Convention aggregate and its read model."""

from datetime import date, datetime
from typing import Any

from pydantic import Field

from immersion.domain.agency.model.value import AgencyId, AgencyKind
from immersion.domain.auth.model.role import Role
from immersion.domain.convention.model.value import (
    ConventionId,
    ConventionStatus,
    InternshipKind,
)
from immersion.domain.shared.model.aggregate import Aggregate
from immersion.domain.shared.model.value import ValueObject


class Signatory(ValueObject):
    """A party whose signature the convention requires.

    ``signed_at`` is the signature itself: set means signed.
    """

    role: Role
    email: str
    phone: str = ""
    first_name: str = ""
    last_name: str = ""
    signed_at: datetime | None = None

    @property
    def has_signed(self) -> bool:
        return self.signed_at is not None


class EstablishmentTutor(ValueObject):
    role: Role = Role.ESTABLISHMENT_TUTOR
    email: str
    phone: str = ""
    first_name: str = ""
    last_name: str = ""
    job: str = ""


_FIELD_BY_ROLE: dict[Role, str] = {
    Role.BENEFICIARY: "beneficiary",
    Role.ESTABLISHMENT_REPRESENTATIVE: "establishment_representative",
    Role.BENEFICIARY_REPRESENTATIVE: "beneficiary_representative",
    Role.BENEFICIARY_CURRENT_EMPLOYER: "beneficiary_current_employer",
}


class Signatories(ValueObject):
    beneficiary: Signatory
    establishment_representative: Signatory
    beneficiary_representative: Signatory | None = None
    beneficiary_current_employer: Signatory | None = None

    def for_role(self, role: Role) -> Signatory | None:
        field_name = _FIELD_BY_ROLE.get(role)
        if field_name is None:
            return None
        return getattr(self, field_name)

    def present(self) -> list[Signatory]:
        return [s for s in (getattr(self, f) for f in _FIELD_BY_ROLE.values()) if s is not None]

    def with_signature(self, role: Role, signed_at: datetime) -> "Signatories":
        signatory = self.for_role(role)
        if signatory is None:
            raise KeyError(role)
        signed = signatory.model_copy(update={"signed_at": signed_at})
        return self.model_copy(update={_FIELD_BY_ROLE[role]: signed})

    def without_signatures(self) -> "Signatories":
        updates = {}
        for field_name in _FIELD_BY_ROLE.values():
            signatory = getattr(self, field_name)
            if signatory is not None:
                updates[field_name] = signatory.model_copy(update={"signed_at": None})
        return self.model_copy(update=updates)


class ValidatorName(ValueObject):
    first_name: str | None = None
    last_name: str | None = None


class ConventionValidators(ValueObject):
    agency_counsellor: ValidatorName | None = None
    agency_validator: ValidatorName | None = None


class Convention(Aggregate):
    """A work-immersion agreement going through signature and agency review."""

    id: ConventionId
    status: ConventionStatus
    status_justification: str | None = None
    agency_id: AgencyId
    signatories: Signatories
    establishment_tutor: EstablishmentTutor
    validators: ConventionValidators | None = None
    updated_at: datetime
    date_submission: datetime
    date_start: date
    date_end: date
    date_validation: datetime | None = None
    date_approval: datetime | None = None
    internship_kind: InternshipKind = InternshipKind.IMMERSION
    siret: str = ""
    business_name: str = ""
    immersion_address: str = ""
    immersion_appellation: str = ""
    immersion_objective: str | None = None
    schedule: dict[str, Any] = Field(default_factory=dict)

    def actor_for_role(self, role: Role) -> Signatory | EstablishmentTutor | None:
        if role == Role.ESTABLISHMENT_TUTOR:
            return self.establishment_tutor
        return self.signatories.for_role(role)


class AgencyRefersTo(ValueObject):
    id: AgencyId
    name: str
    kind: AgencyKind


class ConventionRead(Convention):
    """Convention joined with the agency facts guards need."""

    agency_name: str
    agency_department: str = ""
    agency_kind: AgencyKind = AgencyKind.AUTRE
    agency_refers_to: AgencyRefersTo | None = None

    def to_convention(self) -> Convention:
        return Convention.model_validate(self.model_dump(include=set(Convention.model_fields)))
