"""Tests for handler authorization gates and the startup check."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from immersion.domain.auth.model.credential import Anonymous, ConnectedUserCredential
from immersion.domain.auth.model.value import UserId
from immersion.domain.convention.command.sign import SignConvention, SignConventionHandler
from immersion.domain.link.query.resolve_short_link import ResolveShortLinkHandler
from immersion.domain.shared.authorization.startup import validate_all_handlers
from immersion.domain.shared.error import AuthorizationError, ConfigurationError


class TestAuthenticatedGate:
    @pytest.mark.asyncio
    async def test_anonymous_caller_is_rejected_before_the_handler_runs(self):
        service = AsyncMock()
        handler = SignConventionHandler(
            identity=Anonymous(), signature_service=service, clock=MagicMock()
        )

        with pytest.raises(AuthorizationError) as exc_info:
            await handler.run(SignConvention(convention_id="conv-1"))

        assert exc_info.value.code == "missing_token"
        service.sign.assert_not_called()

    @pytest.mark.asyncio
    async def test_credential_reaches_the_service(self):
        service = AsyncMock()
        service.sign.side_effect = AuthorizationError("nope", code="role_not_allowed_to_sign")
        handler = SignConventionHandler(
            identity=ConnectedUserCredential(user_id=UserId("u1")),
            signature_service=service,
            clock=MagicMock(),
        )

        with pytest.raises(AuthorizationError) as exc_info:
            await handler.run(SignConvention(convention_id="conv-1"))

        assert exc_info.value.code == "role_not_allowed_to_sign"
        service.sign.assert_called_once()


class TestValidateAllHandlers:
    def test_every_registered_handler_declares_a_gate(self):
        validate_all_handlers()

    def test_handler_without_gate_is_reported(self, monkeypatch):
        monkeypatch.delattr(ResolveShortLinkHandler, "__auth__")

        with pytest.raises(ConfigurationError) as exc_info:
            validate_all_handlers()

        assert exc_info.value.code == "missing_auth_declaration"
        assert "ResolveShortLinkHandler" in exc_info.value.message
