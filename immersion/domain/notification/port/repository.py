from abc import abstractmethod
from typing import Protocol

from immersion.domain.notification.model.notification import Notification, TemplateKind
from immersion.domain.shared.port import Port


class NotificationRepository(Port, Protocol):
    @abstractmethod
    async def save(self, notification: Notification) -> None: ...

    @abstractmethod
    async def get_last_notification(
        self, template_kind: TemplateKind, convention_id: str, recipient: str
    ) -> Notification | None:
        """Most recent notification of a kind sent to ``recipient`` about a convention."""
        ...
