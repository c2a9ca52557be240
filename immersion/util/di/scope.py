"""Custom Dishka scopes for the convention service."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """Dependency injection scopes.

    Hierarchy: APP -> UOW

    - APP: Application lifetime (engine, configuration, token signing)
    - UOW: Unit of Work (one HTTP request or one relayed event, one transaction)
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
