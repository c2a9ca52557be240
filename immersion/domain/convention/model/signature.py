"""Pure signature rules."""

from datetime import datetime
from typing import TypeVar

from immersion.domain.auth.model.role import Role
from immersion.domain.convention.model.aggregate import Convention, Signatories
from immersion.domain.convention.model.value import ConventionStatus

C = TypeVar("C", bound=Convention)


def status_after_signature(signatories: Signatories) -> ConventionStatus:
    """IN_REVIEW once every present signatory has signed, PARTIALLY_SIGNED before."""
    if all(s.has_signed for s in signatories.present()):
        return ConventionStatus.IN_REVIEW
    return ConventionStatus.PARTIALLY_SIGNED


def sign_with_role(convention: C, role: Role, signed_at: datetime) -> C:
    """Record the signature of ``role`` and move the status accordingly.

    The caller has already checked that the slot exists and is unsigned.
    """
    signatories = convention.signatories.with_signature(role, signed_at)
    return convention.model_copy(
        update={
            "signatories": signatories,
            "status": status_after_signature(signatories),
        }
    )
