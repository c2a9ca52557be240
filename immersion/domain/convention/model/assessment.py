from datetime import datetime
from enum import StrEnum

from immersion.domain.convention.model.value import ConventionId
from immersion.domain.shared.model.entity import Entity


class AssessmentStatus(StrEnum):
    COMPLETED = "COMPLETED"
    PARTIALLY_COMPLETED = "PARTIALLY_COMPLETED"
    DID_NOT_SHOW = "DID_NOT_SHOW"


class Assessment(Entity):
    """Tutor's evaluation of a finished immersion. Only its existence matters here."""

    convention_id: ConventionId
    status: AssessmentStatus
    created_at: datetime
