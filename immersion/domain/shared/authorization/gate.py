"""Handler-level authorization gates: public() and authenticated()."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from immersion.domain.shared.error import ConfigurationError

_auth_logger = logging.getLogger("immersion.authz")


class Gate:
    """Base for handler-level authorization gates.

    Every CommandHandler/QueryHandler must declare ``__auth__: ClassVar[Gate]``.
    Gates only decide whether a credential is present; the roles a credential
    holds on a given convention are resolved later by RoleResolver.
    """


@dataclass(frozen=True)
class Public(Gate):
    """No credential required."""


@dataclass(frozen=True)
class Authenticated(Gate):
    """Requires a magic-link or connected-user credential."""


_PUBLIC = Public()
_AUTHENTICATED = Authenticated()


def public() -> Public:
    """Mark a handler as publicly accessible."""
    return _PUBLIC


def authenticated() -> Authenticated:
    """Mark a handler as requiring a credential."""
    return _AUTHENTICATED


def check_gate(handler: Any) -> None:
    """Evaluate the handler's ``__auth__`` gate against its ``identity`` attribute."""
    from immersion.domain.auth.model.credential import require_credential

    gate = getattr(type(handler), "__auth__", None)
    if not isinstance(gate, Gate):
        raise ConfigurationError(f"Handler {type(handler).__name__} has no __auth__ declaration")

    if isinstance(gate, Public):
        return

    if isinstance(gate, Authenticated):
        identity = getattr(handler, "identity", None)
        _auth_logger.debug("Auth check: handler=%s, identity=%s", type(handler).__name__, identity)
        require_credential(identity)
        return

    raise ConfigurationError(  # pragma: no cover
        f"Handler {type(handler).__name__} has unhandled __auth__ type: {type(gate).__name__}"
    )
