from immersion.domain.auth.util.di.provider import AuthProvider

__all__ = ["AuthProvider"]
