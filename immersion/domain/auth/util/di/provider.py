"""DI provider for auth domain."""

import logging

from dishka import from_context, provide
from starlette.requests import Request

from immersion.config import Config
from immersion.domain.auth.model.credential import Anonymous, Identity
from immersion.domain.auth.service.role import RoleResolver
from immersion.domain.auth.service.token import TokenService
from immersion.util.di.base import Provider
from immersion.util.di.scope import Scope

logger = logging.getLogger(__name__)


class AuthProvider(Provider):
    """DI provider for token handling and role resolution."""

    request = from_context(provides=Request, scope=Scope.UOW)

    role_resolver = provide(RoleResolver, scope=Scope.UOW)

    @provide(scope=Scope.APP)
    def get_token_service(self, config: Config) -> TokenService:
        return TokenService(_config=config.auth.jwt)

    @provide(scope=Scope.UOW)
    def get_identity(self, request: Request, token_service: TokenService) -> Identity:
        """Resolve the caller from the ``Authorization: Bearer`` header.

        No header means Anonymous. A token that is present but expired or
        forged is an error, so magic-link holders learn they must renew.
        """
        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return Anonymous()

        credential = token_service.decode(auth_header[7:])
        logger.debug("Identity resolved: %s", type(credential).__name__)
        return credential
