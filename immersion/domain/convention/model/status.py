"""Fields derived from a status change."""

from datetime import datetime

from immersion.domain.convention.model.aggregate import (
    Convention,
    ConventionRead,
    ConventionValidators,
    ValidatorName,
)
from immersion.domain.convention.model.value import (
    REVIEWED_STATUSES,
    STATUSES_WITH_JUSTIFICATION,
    VALIDATED_STATUSES,
    ConventionStatus,
)
from immersion.domain.shared.error import ValidationError


def _name_if_given(first_name: str | None, last_name: str | None) -> ValidatorName | None:
    if first_name or last_name:
        return ValidatorName(first_name=first_name, last_name=last_name)
    return None


def apply_status_change(
    convention: ConventionRead,
    target_status: ConventionStatus,
    now: datetime,
    *,
    justification: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
) -> Convention:
    """Return the convention as it must be stored after moving to ``target_status``."""
    if target_status in STATUSES_WITH_JUSTIFICATION:
        if not justification:
            raise ValidationError(
                f"A justification is required for status {target_status}",
                field="status_justification",
                code="missing_status_justification",
            )
    else:
        justification = None

    if target_status in VALIDATED_STATUSES:
        date_approval = convention.date_approval
    elif target_status in REVIEWED_STATUSES:
        date_approval = now
    else:
        date_approval = None

    validators = convention.validators or ConventionValidators()
    if target_status == ConventionStatus.ACCEPTED_BY_COUNSELLOR:
        name = _name_if_given(first_name, last_name)
        if name is not None:
            validators = validators.model_copy(update={"agency_counsellor": name})
    elif target_status == ConventionStatus.ACCEPTED_BY_VALIDATOR:
        name = _name_if_given(first_name, last_name)
        if name is not None:
            validators = validators.model_copy(update={"agency_validator": name})

    signatories = convention.signatories
    if target_status == ConventionStatus.DRAFT:
        signatories = signatories.without_signatures()

    return convention.to_convention().model_copy(
        update={
            "status": target_status,
            "status_justification": justification,
            "date_validation": now if target_status in VALIDATED_STATUSES else None,
            "date_approval": date_approval,
            "validators": validators if validators != ConventionValidators() else None,
            "signatories": signatories,
            "updated_at": now,
        }
    )
