"""Credentials presented by callers.

A caller is either holding a convention magic link (a token scoped to one
convention, one role and one email) or is a connected user whose roles come
from their account. ``Anonymous`` stands for the absence of both.
"""

import hashlib
from dataclasses import dataclass
from typing import TypeGuard

from immersion.domain.auth.model.role import Role
from immersion.domain.auth.model.value import UserId
from immersion.domain.shared.error import AuthorizationError


@dataclass(frozen=True)
class Identity:
    """Base for all request identities."""


@dataclass(frozen=True)
class Anonymous(Identity):
    """No credential was presented."""


@dataclass(frozen=True)
class ConventionMagicLinkCredential(Identity):
    convention_id: str
    role: Role
    email_hash: str
    email: str | None = None


@dataclass(frozen=True)
class ConnectedUserCredential(Identity):
    user_id: UserId


Credential = ConventionMagicLinkCredential | ConnectedUserCredential


def is_credential(identity: object) -> TypeGuard[Credential]:
    return isinstance(identity, (ConventionMagicLinkCredential, ConnectedUserCredential))


def require_credential(identity: Identity | None) -> Credential:
    if not is_credential(identity):
        raise AuthorizationError("Authentication required", code="missing_token")
    return identity


def make_email_hash(email: str) -> str:
    """One-way hash of an email, embedded in magic links in place of the address."""
    return hashlib.md5(email.encode()).hexdigest()
