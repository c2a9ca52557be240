from abc import abstractmethod
from datetime import datetime
from typing import Protocol

from immersion.domain.link.model.short_link import ShortLink
from immersion.domain.link.model.value import ShortLinkId
from immersion.domain.shared.port import Port


class ShortLinkRepository(Port, Protocol):
    @abstractmethod
    async def save(self, short_link: ShortLink) -> None: ...

    @abstractmethod
    async def get(self, short_link_id: ShortLinkId) -> ShortLink | None: ...

    @abstractmethod
    async def mark_used(self, short_link_id: ShortLinkId, used_at: datetime) -> bool:
        """Consume a single-use link. False when it was already consumed."""
        ...


class ShortLinkIdGenerator(Port, Protocol):
    @abstractmethod
    def generate(self) -> ShortLinkId: ...
