"""Convention magic links: signed, expiring, role and email scoped URLs."""

import logging
from datetime import datetime, timedelta
from urllib.parse import urlencode

from immersion.config import Config
from immersion.domain.auth.model.role import Role
from immersion.domain.auth.service.token import TokenService
from immersion.domain.link.model.value import FrontRoute, LinkLifetime
from immersion.domain.shared.service import Service

logger = logging.getLogger(__name__)


class MagicLinkService(Service):
    _tokens: TokenService
    _config: Config

    def expires_at(self, lifetime: LinkLifetime, now: datetime) -> datetime:
        match lifetime:
            case LinkLifetime.SHORT:
                return now + timedelta(days=self._config.magic_link.short_duration_days)
            case LinkLifetime.LONG:
                return now + timedelta(days=self._config.magic_link.long_duration_days)
            case LinkLifetime.TWO_DAYS:
                return now + timedelta(days=2)

    def create_convention_token(
        self,
        convention_id: str,
        role: Role,
        email: str,
        now: datetime,
        lifetime: LinkLifetime = LinkLifetime.SHORT,
    ) -> str:
        return self._tokens.create_convention_token(
            convention_id=convention_id,
            role=role,
            email=email,
            issued_at=now,
            expires_at=self.expires_at(lifetime, now),
        )

    def make_convention_magic_link(
        self,
        convention_id: str,
        role: Role,
        email: str,
        now: datetime,
        target_route: FrontRoute,
        lifetime: LinkLifetime = LinkLifetime.SHORT,
        extra_query_params: dict[str, str] | None = None,
    ) -> str:
        """Front-end URL opening ``target_route`` with a token for (convention, role, email)."""
        token = self.create_convention_token(convention_id, role, email, now, lifetime)
        query = urlencode({"jwt": token, **(extra_query_params or {})})
        logger.debug(
            "Magic link issued: convention=%s role=%s route=%s lifetime=%s",
            convention_id,
            role,
            target_route,
            lifetime,
        )
        return f"{self._config.frontend.url.rstrip('/')}/{target_route}?{query}"
