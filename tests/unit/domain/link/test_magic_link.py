"""Unit tests for MagicLinkService."""

from datetime import UTC, datetime, timedelta
from urllib.parse import parse_qs, urlsplit

from immersion.config import Config, Frontend, JwtConfig
from immersion.domain.auth.model.credential import ConventionMagicLinkCredential
from immersion.domain.auth.model.role import Role
from immersion.domain.auth.service.token import TokenService
from immersion.domain.link.model.value import FrontRoute, LinkLifetime
from immersion.domain.link.service.magic_link import MagicLinkService

SECRET = "test-secret-for-unit-tests-min-32"


def _make_service(frontend_url: str = "https://front.example.fr/") -> MagicLinkService:
    return MagicLinkService(
        _tokens=TokenService(_config=JwtConfig(secret=SECRET)),
        _config=Config(frontend=Frontend(url=frontend_url)),
    )


class TestExpiresAt:
    NOW = datetime(2024, 6, 3, 10, 0, tzinfo=UTC)

    def test_short_lifetime_uses_configured_days(self):
        expires_at = _make_service().expires_at(LinkLifetime.SHORT, self.NOW)
        assert expires_at == self.NOW + timedelta(days=7)

    def test_long_lifetime_uses_configured_days(self):
        expires_at = _make_service().expires_at(LinkLifetime.LONG, self.NOW)
        assert expires_at == self.NOW + timedelta(days=30)

    def test_two_days(self):
        expires_at = _make_service().expires_at(LinkLifetime.TWO_DAYS, self.NOW)
        assert expires_at == self.NOW + timedelta(days=2)


class TestMakeConventionMagicLink:
    def test_url_opens_the_route_with_a_token_for_the_holder(self):
        service = _make_service()
        now = datetime.now(UTC)

        url = service.make_convention_magic_link(
            convention_id="conv-1",
            role=Role.BENEFICIARY,
            email="beneficiary@mail.com",
            now=now,
            target_route=FrontRoute.CONVENTION_TO_SIGN,
            extra_query_params={"mtm_source": "sms"},
        )

        parts = urlsplit(url)
        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == (
            "https://front.example.fr/verifier-et-signer"
        )
        query = parse_qs(parts.query)
        assert query["mtm_source"] == ["sms"]

        credential = service._tokens.decode(query["jwt"][0])
        assert isinstance(credential, ConventionMagicLinkCredential)
        assert credential.convention_id == "conv-1"
        assert credential.role == Role.BENEFICIARY
        assert credential.email == "beneficiary@mail.com"
