from typing import Any

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from immersion.domain.auth.model.user import User
from immersion.domain.auth.model.value import UserId
from immersion.domain.auth.port.repository import UserRepository
from immersion.infrastructure.persistence.tables import users_table


def _row_to_user(row: dict[str, Any]) -> User:
    return User(
        id=UserId(row["id"]),
        email=row["email"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        is_backoffice_admin=row["is_backoffice_admin"],
    )


class PostgresUserRepository(UserRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, user_id: UserId) -> User | None:
        result = await self.session.execute(select(users_table).where(users_table.c.id == user_id))
        row = result.mappings().first()
        return _row_to_user(dict(row)) if row else None

    async def get_by_ids(self, user_ids: list[UserId]) -> list[User]:
        if not user_ids:
            return []
        result = await self.session.execute(
            select(users_table).where(users_table.c.id.in_(user_ids))
        )
        return [_row_to_user(dict(r)) for r in result.mappings().all()]

    async def save(self, user: User) -> None:
        row = user.model_dump()
        exists = await self.session.execute(
            select(users_table.c.id).where(users_table.c.id == user.id)
        )
        if exists.first():
            await self.session.execute(
                update(users_table).where(users_table.c.id == user.id).values(**row)
            )
        else:
            await self.session.execute(insert(users_table).values(**row))
        await self.session.flush()
