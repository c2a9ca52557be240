from dishka import provide

from immersion.domain.notification.port.repository import NotificationRepository
from immersion.domain.notification.service.notification import NotificationService
from immersion.domain.notification.service.throttle import ReminderThrottle
from immersion.domain.shared.outbox import Outbox
from immersion.util.di.base import Provider
from immersion.util.di.scope import Scope


class NotificationProvider(Provider):
    @provide(scope=Scope.UOW)
    def get_notification_service(
        self, repo: NotificationRepository, outbox: Outbox
    ) -> NotificationService:
        return NotificationService(_repo=repo, _outbox=outbox)

    @provide(scope=Scope.UOW)
    def get_reminder_throttle(self, repo: NotificationRepository) -> ReminderThrottle:
        return ReminderThrottle(_repo=repo)
