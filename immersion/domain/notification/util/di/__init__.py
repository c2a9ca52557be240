from immersion.domain.notification.util.di.provider import NotificationProvider

__all__ = ["NotificationProvider"]
