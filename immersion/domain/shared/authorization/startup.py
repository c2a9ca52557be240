"""Startup check that every handler declares an authorization gate."""

import logging

from immersion.domain.shared.authorization.gate import Gate
from immersion.domain.shared.command import CommandHandler
from immersion.domain.shared.error import ConfigurationError
from immersion.domain.shared.query import QueryHandler

logger = logging.getLogger("immersion.authz")


def _all_subclasses(cls: type) -> list[type]:
    found = []
    for sub in cls.__subclasses__():
        found.append(sub)
        found.extend(_all_subclasses(sub))
    return found


def validate_all_handlers() -> None:
    """Raise ConfigurationError listing every handler without an ``__auth__`` gate."""
    violations = [
        handler_cls.__name__
        for base in (CommandHandler, QueryHandler)
        for handler_cls in _all_subclasses(base)
        if not isinstance(getattr(handler_cls, "__auth__", None), Gate)
    ]
    if violations:
        raise ConfigurationError(
            f"Handlers missing an __auth__ declaration: {', '.join(sorted(violations))}",
            code="missing_auth_declaration",
        )
    logger.info("Authorization startup validation passed for all handlers")
