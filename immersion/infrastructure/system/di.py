"""DI provider for clock and id generation adapters."""

from dishka import provide

from immersion.config import Config
from immersion.domain.link.port.short_link import ShortLinkIdGenerator
from immersion.domain.shared.port.clock import Clock
from immersion.infrastructure.system.clock import SystemClock
from immersion.infrastructure.system.short_link_id import RandomShortLinkIdGenerator
from immersion.util.di.base import Provider
from immersion.util.di.scope import Scope


class SystemProvider(Provider):
    clock = provide(SystemClock, scope=Scope.APP, provides=Clock)

    @provide(scope=Scope.APP)
    def get_short_link_id_generator(self, config: Config) -> ShortLinkIdGenerator:
        return RandomShortLinkIdGenerator(length=config.short_link.id_length)
