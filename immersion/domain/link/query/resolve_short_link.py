from immersion.domain.link.model.value import ShortLinkId
from immersion.domain.link.service.short_link import ShortLinkService
from immersion.domain.shared.authorization.gate import public
from immersion.domain.shared.port.clock import Clock
from immersion.domain.shared.query import Query, QueryHandler, Result


class ResolveShortLink(Query):
    short_link_id: ShortLinkId


class ResolvedShortLink(Result):
    url: str


class ResolveShortLinkHandler(QueryHandler[ResolveShortLink, ResolvedShortLink]):
    __auth__ = public()
    short_link_service: ShortLinkService
    clock: Clock

    async def run(self, query: ResolveShortLink) -> ResolvedShortLink:
        url = await self.short_link_service.resolve(query.short_link_id, self.clock.now())
        return ResolvedShortLink(url=url)
