import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

from pydantic import BaseModel, Field

from immersion.domain.notification.event.events import NotificationAdded
from immersion.domain.notification.model.notification import Notification, NotificationId
from immersion.domain.notification.port.repository import NotificationRepository
from immersion.domain.shared.error import ImmersionError
from immersion.domain.shared.outbox import Outbox
from immersion.domain.shared.service import Service

logger = logging.getLogger(__name__)

K = TypeVar("K")


class NotificationBatchResult(BaseModel):
    sent: list[NotificationId] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)


class NotificationService(Service):
    _repo: NotificationRepository
    _outbox: Outbox

    async def save(self, notification: Notification) -> None:
        """Store a notification and queue it for delivery in the same unit of work."""
        await self._repo.save(notification)
        await self._outbox.append(
            NotificationAdded(
                notification_id=notification.id,
                kind=notification.kind,
                template_kind=notification.template_kind,
                created_at=notification.created_at,
            )
        )
        logger.info(
            "Notification %s (%s) queued for %s",
            notification.id,
            notification.template_kind,
            notification.kind,
        )

    async def notify_all(
        self, recipients: Iterable[K], build: Callable[[K], Notification]
    ) -> NotificationBatchResult:
        """Notify every recipient; one recipient failing does not stop the others.

        Failures are reported per recipient in ``errors``, keyed by ``str(recipient)``.
        """
        result = NotificationBatchResult()
        for recipient in recipients:
            try:
                notification = build(recipient)
                await self.save(notification)
            except ImmersionError as e:
                logger.warning("Could not notify %s: %s", recipient, e.message)
                result.errors[str(recipient)] = e.message
            else:
                result.sent.append(notification.id)
        return result
