"""Roles a caller can hold on a convention."""

from enum import StrEnum


class Role(StrEnum):
    BENEFICIARY = "beneficiary"
    BENEFICIARY_REPRESENTATIVE = "beneficiary-representative"
    BENEFICIARY_CURRENT_EMPLOYER = "beneficiary-current-employer"
    ESTABLISHMENT_REPRESENTATIVE = "establishment-representative"
    ESTABLISHMENT_TUTOR = "establishment-tutor"
    COUNSELLOR = "counsellor"
    VALIDATOR = "validator"
    AGENCY_ADMIN = "agency-admin"
    AGENCY_VIEWER = "agency-viewer"
    TO_REVIEW = "to-review"
    BACK_OFFICE = "back-office"


class AgencyRole(StrEnum):
    """Subset of roles granted through agency membership."""

    COUNSELLOR = Role.COUNSELLOR.value
    VALIDATOR = Role.VALIDATOR.value
    AGENCY_ADMIN = Role.AGENCY_ADMIN.value
    AGENCY_VIEWER = Role.AGENCY_VIEWER.value
    TO_REVIEW = Role.TO_REVIEW.value

    def as_role(self) -> Role:
        return Role(self.value)


SIGNATORY_ROLES: frozenset[Role] = frozenset(
    {
        Role.BENEFICIARY,
        Role.BENEFICIARY_REPRESENTATIVE,
        Role.BENEFICIARY_CURRENT_EMPLOYER,
        Role.ESTABLISHMENT_REPRESENTATIVE,
    }
)

# Agency roles allowed to act on a convention (review, transfer, remind).
AGENCY_MODIFIER_ROLES: frozenset[Role] = frozenset({Role.COUNSELLOR, Role.VALIDATOR})
