from enum import StrEnum
from typing import NewType

AgencyId = NewType("AgencyId", str)


class AgencyKind(StrEnum):
    POLE_EMPLOI = "pole-emploi"
    MISSION_LOCALE = "mission-locale"
    CAP_EMPLOI = "cap-emploi"
    CONSEIL_DEPARTEMENTAL = "conseil-departemental"
    PREPA_APPRENTISSAGE = "prepa-apprentissage"
    STRUCTURE_IAE = "structure-IAE"
    AUTRE = "autre"
    IMMERSION_FACILE = "immersion-facile"


class AgencyStatus(StrEnum):
    ACTIVE = "active"
    CLOSED = "closed"
    NEEDS_REVIEW = "needsReview"
    REJECTED = "rejected"
