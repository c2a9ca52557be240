from enum import StrEnum
from typing import NewType

ShortLinkId = NewType("ShortLinkId", str)


class LinkLifetime(StrEnum):
    SHORT = "short"
    LONG = "long"
    TWO_DAYS = "2Days"


class FrontRoute(StrEnum):
    """Front-end pages a convention magic link can open."""

    CONVENTION_TO_SIGN = "verifier-et-signer"
    MANAGE_CONVENTION = "pilotage-convention"
    CONVENTION_STATUS = "statut-demande"
    EDIT_CONVENTION = "demande-immersion"
    ASSESSMENT = "bilan-immersion"
