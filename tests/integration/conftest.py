"""Fixtures for repository integration tests on an in-memory SQLite database."""

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from immersion.config import Config, DatabaseConfig
from immersion.domain.agency.model.aggregate import Agency, AgencyUserRight
from immersion.domain.agency.model.value import AgencyId
from immersion.domain.auth.model.role import AgencyRole
from immersion.domain.auth.model.user import User
from immersion.domain.auth.model.value import UserId
from immersion.infrastructure.persistence.database import create_db_engine, create_session_factory
from immersion.infrastructure.persistence.repository.agency import PostgresAgencyRepository
from immersion.infrastructure.persistence.repository.user import PostgresUserRepository
from immersion.infrastructure.persistence.tables import metadata


@pytest_asyncio.fixture
async def engine():
    """Per-test in-memory database with every table created."""
    config = Config(database=DatabaseConfig(url="sqlite+aiosqlite:///:memory:", auto_migrate=False))
    engine: AsyncEngine = create_db_engine(config)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine):
    async with create_session_factory(engine)() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def agencies(session: AsyncSession) -> dict[str, Agency]:
    """Two agencies, the first delegating validation to the second, and their staff."""
    users = [
        User(id=UserId("user-c"), email="counsellor@agency.fr", first_name="Claire"),
        User(id=UserId("user-v"), email="validator@referred.fr"),
    ]
    for user in users:
        await PostgresUserRepository(session).save(user)

    referred = Agency(
        id=AgencyId("agency-2"),
        name="Agence Lyon",
        department="69",
        users_rights={UserId("user-v"): AgencyUserRight(roles=[AgencyRole.VALIDATOR])},
    )
    delegating = Agency(
        id=AgencyId("agency-1"),
        name="Agence Paris",
        department="75",
        refers_to_agency_id=referred.id,
        users_rights={
            UserId("user-c"): AgencyUserRight(
                roles=[AgencyRole.COUNSELLOR], is_notified_by_email=True
            )
        },
    )
    repo = PostgresAgencyRepository(session)
    await repo.save(referred)
    await repo.save(delegating)
    return {agency.id: agency for agency in (delegating, referred)}
