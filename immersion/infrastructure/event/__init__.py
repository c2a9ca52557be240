from immersion.infrastructure.event.di import EventProvider

__all__ = ["EventProvider"]
