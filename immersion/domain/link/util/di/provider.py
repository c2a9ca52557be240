from dishka import provide

from immersion.config import Config
from immersion.domain.auth.service.token import TokenService
from immersion.domain.link.command.renew_magic_link import RenewConventionMagicLinkHandler
from immersion.domain.link.port.short_link import ShortLinkIdGenerator, ShortLinkRepository
from immersion.domain.link.query.resolve_short_link import ResolveShortLinkHandler
from immersion.domain.link.service.magic_link import MagicLinkService
from immersion.domain.link.service.short_link import ShortLinkService
from immersion.util.di.base import Provider
from immersion.util.di.scope import Scope


class LinkProvider(Provider):
    @provide(scope=Scope.APP)
    def get_magic_link_service(self, tokens: TokenService, config: Config) -> MagicLinkService:
        return MagicLinkService(_tokens=tokens, _config=config)

    @provide(scope=Scope.UOW)
    def get_short_link_service(
        self,
        repo: ShortLinkRepository,
        id_generator: ShortLinkIdGenerator,
        magic_links: MagicLinkService,
        config: Config,
    ) -> ShortLinkService:
        return ShortLinkService(
            _repo=repo,
            _id_generator=id_generator,
            _magic_links=magic_links,
            _config=config,
        )

    renew_magic_link_handler = provide(RenewConventionMagicLinkHandler, scope=Scope.UOW)
    resolve_short_link_handler = provide(ResolveShortLinkHandler, scope=Scope.UOW)
