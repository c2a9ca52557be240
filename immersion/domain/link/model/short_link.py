from datetime import datetime

from immersion.domain.link.model.value import ShortLinkId
from immersion.domain.shared.model.entity import Entity


class ShortLink(Entity):
    """Opaque id standing for a long capability URL, for SMS."""

    id: ShortLinkId
    url: str
    single_use: bool = False
    used_at: datetime | None = None
    created_at: datetime
