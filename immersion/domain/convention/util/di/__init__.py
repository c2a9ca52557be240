from immersion.domain.convention.util.di.provider import ConventionProvider

__all__ = ["ConventionProvider"]
