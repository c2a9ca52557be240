from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from immersion.domain.notification.model.notification import (
    FollowedIds,
    Notification,
    TemplateKind,
)
from immersion.domain.notification.port.repository import NotificationRepository
from immersion.infrastructure.persistence.database import as_utc
from immersion.infrastructure.persistence.tables import notifications_table


def _notification_to_row(notification: Notification) -> dict[str, Any]:
    return {
        "id": notification.id,
        "kind": notification.kind.value,
        "template_kind": notification.template_kind.value,
        "recipient": notification.recipient,
        "params": notification.params,
        **notification.followed_ids.model_dump(),
        "created_at": notification.created_at,
    }


def _row_to_notification(row: dict[str, Any]) -> Notification:
    return Notification(
        id=row["id"],
        kind=row["kind"],
        template_kind=row["template_kind"],
        recipient=row["recipient"],
        params=row["params"],
        followed_ids=FollowedIds(
            convention_id=row["convention_id"],
            agency_id=row["agency_id"],
            establishment_siret=row["establishment_siret"],
            user_id=row["user_id"],
        ),
        created_at=as_utc(row["created_at"]),
    )


class PostgresNotificationRepository(NotificationRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def save(self, notification: Notification) -> None:
        await self.session.execute(
            insert(notifications_table).values(**_notification_to_row(notification))
        )
        await self.session.flush()

    async def get_last_notification(
        self, template_kind: TemplateKind, convention_id: str, recipient: str
    ) -> Notification | None:
        stmt = (
            select(notifications_table)
            .where(notifications_table.c.template_kind == template_kind.value)
            .where(notifications_table.c.convention_id == convention_id)
            .where(notifications_table.c.recipient == recipient)
            .order_by(notifications_table.c.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return _row_to_notification(dict(row)) if row else None
