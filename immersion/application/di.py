from dishka import AsyncContainer, make_async_container

from immersion.config import Config
from immersion.domain.auth.util.di import AuthProvider
from immersion.domain.convention.util.di import ConventionProvider
from immersion.domain.link.util.di import LinkProvider
from immersion.domain.notification.util.di import NotificationProvider
from immersion.infrastructure.event import EventProvider
from immersion.infrastructure.persistence import PersistenceProvider
from immersion.infrastructure.system import SystemProvider
from immersion.util.di.scope import Scope


def create_container(config: Config | None = None) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    return make_async_container(
        PersistenceProvider(),
        SystemProvider(),
        EventProvider(),
        AuthProvider(),
        NotificationProvider(),
        LinkProvider(),
        ConventionProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
