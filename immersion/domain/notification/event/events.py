from immersion.domain.notification.model.notification import (
    NotificationId,
    NotificationKind,
    TemplateKind,
)
from immersion.domain.shared.event import Event


class NotificationAdded(Event):
    """A notification was stored and waits for the email/SMS gateway."""

    notification_id: NotificationId
    kind: NotificationKind
    template_kind: TemplateKind
