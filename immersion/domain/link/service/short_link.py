"""Short links: opaque ids redirecting to long capability URLs."""

import logging
from datetime import datetime

from immersion.config import Config
from immersion.domain.auth.model.role import Role
from immersion.domain.link.model.short_link import ShortLink
from immersion.domain.link.model.value import FrontRoute, LinkLifetime, ShortLinkId
from immersion.domain.link.port.short_link import ShortLinkIdGenerator, ShortLinkRepository
from immersion.domain.link.service.magic_link import MagicLinkService
from immersion.domain.shared.error import NotFoundError
from immersion.domain.shared.service import Service

logger = logging.getLogger(__name__)


class ShortLinkService(Service):
    _repo: ShortLinkRepository
    _id_generator: ShortLinkIdGenerator
    _magic_links: MagicLinkService
    _config: Config

    async def shorten(self, long_url: str, now: datetime, single_use: bool = False) -> str:
        short_link_id = self._id_generator.generate()
        await self._repo.save(
            ShortLink(id=short_link_id, url=long_url, single_use=single_use, created_at=now)
        )
        return self.url_for(short_link_id)

    def url_for(self, short_link_id: ShortLinkId) -> str:
        api_url = self._config.server.api_url.rstrip("/")
        return f"{api_url}/{self._config.short_link.route}/{short_link_id}"

    async def resolve(self, short_link_id: ShortLinkId, now: datetime) -> str:
        short_link = await self._repo.get(short_link_id)
        if short_link is None:
            raise NotFoundError(
                f"Short link not found: {short_link_id}", code="short_link_not_found"
            )
        if short_link.single_use and not await self._repo.mark_used(short_link_id, now):
            raise NotFoundError(
                f"Short link already used: {short_link_id}", code="short_link_already_used"
            )
        return short_link.url

    async def make_magic_short_link(
        self,
        convention_id: str,
        role: Role,
        email: str,
        now: datetime,
        target_route: FrontRoute,
        lifetime: LinkLifetime = LinkLifetime.SHORT,
        extra_query_params: dict[str, str] | None = None,
    ) -> str:
        long_url = self._magic_links.make_convention_magic_link(
            convention_id=convention_id,
            role=role,
            email=email,
            now=now,
            target_route=target_route,
            lifetime=lifetime,
            extra_query_params=extra_query_params,
        )
        short_url = await self.shorten(long_url, now)
        logger.debug("Short link %s issued for convention %s", short_url, convention_id)
        return short_url
