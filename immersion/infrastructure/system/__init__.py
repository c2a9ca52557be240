from immersion.infrastructure.system.di import SystemProvider

__all__ = ["SystemProvider"]
