from typing import AsyncIterable

from dishka import from_context, provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from immersion.config import Config
from immersion.domain.agency.port.repository import AgencyRepository
from immersion.domain.auth.port.repository import UserRepository
from immersion.domain.convention.port.repository import (
    AssessmentRepository,
    ConventionQueries,
    ConventionRepository,
)
from immersion.domain.link.port.short_link import ShortLinkRepository
from immersion.domain.notification.port.repository import NotificationRepository
from immersion.domain.shared.port.event_repository import EventRepository
from immersion.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
)
from immersion.infrastructure.persistence.repository.agency import PostgresAgencyRepository
from immersion.infrastructure.persistence.repository.assessment import (
    PostgresAssessmentRepository,
)
from immersion.infrastructure.persistence.repository.convention import (
    PostgresConventionQueries,
    PostgresConventionRepository,
)
from immersion.infrastructure.persistence.repository.event import SQLAlchemyEventRepository
from immersion.infrastructure.persistence.repository.notification import (
    PostgresNotificationRepository,
)
from immersion.infrastructure.persistence.repository.short_link import (
    PostgresShortLinkRepository,
)
from immersion.infrastructure.persistence.repository.user import PostgresUserRepository
from immersion.util.di.base import Provider
from immersion.util.di.scope import Scope


class PersistenceProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)

    # APP-scoped factories
    @provide(scope=Scope.APP)
    def get_engine(self, config: Config) -> AsyncEngine:
        return create_db_engine(config)

    @provide(scope=Scope.APP)
    def get_session_factory(self, engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
        return create_session_factory(engine)

    # UOW-scoped session: everything in a unit of work commits or rolls back together
    @provide(scope=Scope.UOW)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterable[AsyncSession]:
        async with session_factory() as session:
            yield session
            await session.commit()

    # UOW-scoped repositories
    convention_repo = provide(
        PostgresConventionRepository, scope=Scope.UOW, provides=ConventionRepository
    )
    convention_queries = provide(
        PostgresConventionQueries, scope=Scope.UOW, provides=ConventionQueries
    )
    assessment_repo = provide(
        PostgresAssessmentRepository, scope=Scope.UOW, provides=AssessmentRepository
    )
    agency_repo = provide(PostgresAgencyRepository, scope=Scope.UOW, provides=AgencyRepository)
    user_repo = provide(PostgresUserRepository, scope=Scope.UOW, provides=UserRepository)
    notification_repo = provide(
        PostgresNotificationRepository, scope=Scope.UOW, provides=NotificationRepository
    )
    short_link_repo = provide(
        PostgresShortLinkRepository, scope=Scope.UOW, provides=ShortLinkRepository
    )
    event_repo = provide(SQLAlchemyEventRepository, scope=Scope.UOW, provides=EventRepository)
