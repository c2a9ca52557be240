"""Token service for JWT creation and validation."""

import logging
from datetime import datetime, timedelta
from typing import Any

import jwt
from pydantic import BaseModel

from immersion.config import JwtConfig
from immersion.domain.auth.model.credential import (
    ConnectedUserCredential,
    ConventionMagicLinkCredential,
    Credential,
    make_email_hash,
)
from immersion.domain.auth.model.role import Role
from immersion.domain.auth.model.value import UserId
from immersion.domain.shared.error import AuthorizationError
from immersion.domain.shared.service import Service

logger = logging.getLogger(__name__)


def _str_claim(payload: dict[str, Any], name: str) -> str:
    value = payload.get(name)
    if not isinstance(value, str) or not value:
        raise AuthorizationError(f"Invalid token claim: {name}", code="invalid_token")
    return value


def _int_claim(payload: dict[str, Any], name: str) -> int:
    value = payload.get(name)
    if not isinstance(value, int) or isinstance(value, bool):
        raise AuthorizationError(f"Invalid token claim: {name}", code="invalid_token")
    return value


class ConventionTokenPayload(BaseModel):
    """Claims of a convention magic-link token."""

    convention_id: str
    role: Role
    email_hash: str
    email: str | None = None
    issued_at: datetime
    expires_at: datetime


class TokenService(Service):
    """Signs and verifies the two JWT kinds accepted by the API.

    - Convention tokens (magic links) are scoped to one convention, one role
      and one email, and expire after a configurable lifetime
    - Connected-user tokens identify an account
    """

    _config: JwtConfig

    def create_convention_token(
        self,
        convention_id: str,
        role: Role,
        email: str,
        issued_at: datetime,
        expires_at: datetime,
    ) -> str:
        payload = {
            "applicationId": convention_id,
            "role": role.value,
            "emailHash": make_email_hash(email),
            "email": email,
            "version": self._config.version,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return self._encode(payload)

    def create_connected_user_token(self, user_id: UserId, issued_at: datetime) -> str:
        expires_at = issued_at + timedelta(minutes=self._config.connected_user_expire_minutes)
        payload = {
            "userId": user_id,
            "version": self._config.version,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return self._encode(payload)

    def decode(self, token: str) -> Credential:
        """Verify a token and turn it into a credential.

        Raises:
            AuthorizationError: code ``token_expired`` or ``invalid_token``
        """
        try:
            payload = jwt.decode(token, self._config.secret, algorithms=[self._config.algorithm])
        except jwt.ExpiredSignatureError as e:
            raise AuthorizationError("Token has expired", code="token_expired") from e
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected token: %s", e)
            raise AuthorizationError("Invalid token", code="invalid_token") from e

        self._check_version(payload)

        if "applicationId" in payload:
            return ConventionMagicLinkCredential(
                convention_id=_str_claim(payload, "applicationId"),
                role=self._parse_role(payload),
                email_hash=_str_claim(payload, "emailHash"),
                email=payload.get("email"),
            )
        if "userId" in payload:
            return ConnectedUserCredential(user_id=UserId(_str_claim(payload, "userId")))
        raise AuthorizationError("Unsupported token payload", code="invalid_token")

    def decode_convention_token_ignoring_expiry(self, token: str) -> ConventionTokenPayload:
        """Verify the signature of a convention token, accepting expired ones.

        Used to renew a magic link: the holder proves the link was issued by us.
        """
        try:
            payload = jwt.decode(
                token,
                self._config.secret,
                algorithms=[self._config.algorithm],
                options={"verify_exp": False},
            )
        except jwt.InvalidTokenError as e:
            raise AuthorizationError("Invalid token", code="invalid_token") from e

        if "applicationId" not in payload:
            raise AuthorizationError("Not a convention token", code="invalid_token")

        return ConventionTokenPayload(
            convention_id=_str_claim(payload, "applicationId"),
            role=self._parse_role(payload),
            email_hash=_str_claim(payload, "emailHash"),
            email=payload.get("email"),
            issued_at=_int_claim(payload, "iat"),
            expires_at=_int_claim(payload, "exp"),
        )

    def _encode(self, payload: dict[str, Any]) -> str:
        return jwt.encode(payload, self._config.secret, algorithm=self._config.algorithm)

    def _check_version(self, payload: dict[str, Any]) -> None:
        version = payload.get("version", self._config.version)
        if not isinstance(version, int) or isinstance(version, bool):
            raise AuthorizationError("Invalid token version", code="invalid_token")
        if version < self._config.version:
            raise AuthorizationError("Token has been revoked", code="token_revoked")

    @staticmethod
    def _parse_role(payload: dict[str, Any]) -> Role:
        try:
            return Role(payload["role"])
        except (KeyError, TypeError, ValueError) as e:
            raise AuthorizationError("Invalid token role", code="invalid_token") from e
