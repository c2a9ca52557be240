"""Value objects for the convention domain."""

from enum import StrEnum
from typing import NewType

ConventionId = NewType("ConventionId", str)


class ConventionStatus(StrEnum):
    DRAFT = "DRAFT"
    READY_TO_SIGN = "READY_TO_SIGN"
    PARTIALLY_SIGNED = "PARTIALLY_SIGNED"
    IN_REVIEW = "IN_REVIEW"
    ACCEPTED_BY_COUNSELLOR = "ACCEPTED_BY_COUNSELLOR"
    ACCEPTED_BY_VALIDATOR = "ACCEPTED_BY_VALIDATOR"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    DEPRECATED = "DEPRECATED"


class InternshipKind(StrEnum):
    IMMERSION = "immersion"
    MINI_STAGE_CCI = "mini-stage-cci"


# Statuses whose reason must be recorded; the justification is dropped for any other status.
STATUSES_WITH_JUSTIFICATION: frozenset[ConventionStatus] = frozenset(
    {
        ConventionStatus.REJECTED,
        ConventionStatus.CANCELLED,
        ConventionStatus.DEPRECATED,
        ConventionStatus.DRAFT,
    }
)

VALIDATED_STATUSES: frozenset[ConventionStatus] = frozenset(
    {ConventionStatus.ACCEPTED_BY_VALIDATOR}
)

REVIEWED_STATUSES: frozenset[ConventionStatus] = frozenset(
    {ConventionStatus.ACCEPTED_BY_COUNSELLOR}
)

# Only reachable by signing, never requested directly.
SIGNATURE_STATUSES: frozenset[ConventionStatus] = frozenset(
    {ConventionStatus.PARTIALLY_SIGNED, ConventionStatus.IN_REVIEW}
)
