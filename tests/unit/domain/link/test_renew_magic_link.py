"""Unit tests for RenewConventionMagicLinkHandler."""

from datetime import UTC, date, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from immersion.config import Config, JwtConfig
from immersion.domain.agency.model.aggregate import Agency, AgencyUserRight
from immersion.domain.agency.model.value import AgencyId
from immersion.domain.auth.model.role import AgencyRole, Role
from immersion.domain.auth.model.user import User
from immersion.domain.auth.model.value import UserId
from immersion.domain.auth.service.token import TokenService
from immersion.domain.convention.model.aggregate import (
    ConventionRead,
    EstablishmentTutor,
    Signatories,
    Signatory,
)
from immersion.domain.convention.model.value import ConventionId, ConventionStatus
from immersion.domain.link.command.renew_magic_link import (
    RenewConventionMagicLink,
    RenewConventionMagicLinkHandler,
)
from immersion.domain.link.event.events import MagicLinkRenewalRequested
from immersion.domain.link.model.value import FrontRoute
from immersion.domain.link.service.magic_link import MagicLinkService
from immersion.domain.notification.model.notification import TemplateKind
from immersion.domain.shared.error import AuthorizationError, NotFoundError, ValidationError

NOW = datetime(2024, 6, 3, 10, 0, tzinfo=UTC)
SECRET = "test-secret-for-unit-tests-min-32"


def _make_convention() -> ConventionRead:
    return ConventionRead(
        id=ConventionId("conv-1"),
        status=ConventionStatus.IN_REVIEW,
        agency_id=AgencyId("agency-1"),
        signatories=Signatories(
            beneficiary=Signatory(role=Role.BENEFICIARY, email="beneficiary@mail.com"),
            establishment_representative=Signatory(
                role=Role.ESTABLISHMENT_REPRESENTATIVE, email="boss@company.fr"
            ),
        ),
        establishment_tutor=EstablishmentTutor(email="tutor@company.fr"),
        updated_at=NOW,
        date_submission=NOW,
        date_start=date(2024, 6, 10),
        date_end=date(2024, 6, 20),
        agency_name="Agence Paris",
    )


class _Fixture:
    def __init__(self, convention: ConventionRead | None = None) -> None:
        self.tokens = TokenService(_config=JwtConfig(secret=SECRET))
        self.queries = AsyncMock()
        self.queries.get_convention_by_id.return_value = convention or _make_convention()
        counsellors = [
            User(id=UserId("c1"), email="counsellor@agency.fr"),
            User(id=UserId("c2"), email="other@agency.fr"),
        ]
        self.agency_repo = AsyncMock()
        self.agency_repo.get_by_id.return_value = Agency(
            id=AgencyId("agency-1"),
            name="Agence Paris",
            users_rights={
                user.id: AgencyUserRight(roles=[AgencyRole.COUNSELLOR]) for user in counsellors
            },
        )
        self.user_repo = AsyncMock()
        self.user_repo.get_by_ids.return_value = counsellors
        self.notifications = AsyncMock()
        self.outbox = AsyncMock()
        clock = MagicMock()
        clock.now.return_value = NOW

        self.handler = RenewConventionMagicLinkHandler(
            token_service=self.tokens,
            magic_links=MagicLinkService(_tokens=self.tokens, _config=Config()),
            convention_queries=self.queries,
            agency_repo=self.agency_repo,
            user_repo=self.user_repo,
            notifications=self.notifications,
            outbox=self.outbox,
            clock=clock,
        )

    def expired_token(self, role: Role, email: str, convention_id: str = "conv-1") -> str:
        issued = datetime.now(UTC) - timedelta(days=40)
        return self.tokens.create_convention_token(
            convention_id, role, email, issued, issued + timedelta(days=30)
        )


class TestRenewConventionMagicLink:
    @pytest.mark.asyncio
    async def test_signatory_gets_a_fresh_link_by_email(self):
        fx = _Fixture()

        result = await fx.handler.run(
            RenewConventionMagicLink(
                expired_jwt=fx.expired_token(Role.BENEFICIARY, "beneficiary@mail.com"),
                target_route=FrontRoute.CONVENTION_TO_SIGN,
            )
        )

        assert result.convention_id == "conv-1"
        assert result.sent == 1
        notification = fx.notifications.save.call_args.args[0]
        assert notification.recipient == "beneficiary@mail.com"
        assert notification.template_kind == TemplateKind.MAGIC_LINK_RENEWAL
        assert "/verifier-et-signer?jwt=" in notification.params["magic_link"]

        event = fx.outbox.append.call_args.args[0]
        assert isinstance(event, MagicLinkRenewalRequested)
        assert event.role == Role.BENEFICIARY
        assert event.created_at == NOW

    @pytest.mark.asyncio
    async def test_counsellor_link_goes_only_to_the_matching_agency_user(self):
        fx = _Fixture()

        result = await fx.handler.run(
            RenewConventionMagicLink(
                expired_jwt=fx.expired_token(Role.COUNSELLOR, "other@agency.fr"),
                target_route=FrontRoute.MANAGE_CONVENTION,
            )
        )

        assert result.sent == 1
        assert fx.notifications.save.call_args.args[0].recipient == "other@agency.fr"

    @pytest.mark.asyncio
    async def test_email_no_longer_on_the_convention(self):
        fx = _Fixture()

        with pytest.raises(AuthorizationError) as exc_info:
            await fx.handler.run(
                RenewConventionMagicLink(
                    expired_jwt=fx.expired_token(Role.BENEFICIARY, "old@mail.com"),
                    target_route=FrontRoute.CONVENTION_TO_SIGN,
                )
            )

        assert exc_info.value.code == "forbidden_missing_rights"
        fx.notifications.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_unsupported_route(self):
        fx = _Fixture()

        with pytest.raises(ValidationError) as exc_info:
            await fx.handler.run(
                RenewConventionMagicLink(
                    expired_jwt=fx.expired_token(Role.BENEFICIARY, "beneficiary@mail.com"),
                    target_route="admin",
                )
            )

        assert exc_info.value.code == "unsupported_renewal_route"

    @pytest.mark.asyncio
    async def test_forged_token(self):
        fx = _Fixture()

        with pytest.raises(AuthorizationError) as exc_info:
            await fx.handler.run(
                RenewConventionMagicLink(
                    expired_jwt="eyJhbGciOiJIUzI1NiJ9.e30.forged",
                    target_route=FrontRoute.CONVENTION_TO_SIGN,
                )
            )

        assert exc_info.value.code == "invalid_token"

    @pytest.mark.asyncio
    async def test_back_office_links_are_not_renewed(self):
        fx = _Fixture()

        with pytest.raises(AuthorizationError) as exc_info:
            await fx.handler.run(
                RenewConventionMagicLink(
                    expired_jwt=fx.expired_token(Role.BACK_OFFICE, "admin@immersion.fr"),
                    target_route=FrontRoute.MANAGE_CONVENTION,
                )
            )

        assert exc_info.value.code == "role_not_renewable"

    @pytest.mark.asyncio
    async def test_deleted_convention(self):
        fx = _Fixture()
        fx.queries.get_convention_by_id.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            await fx.handler.run(
                RenewConventionMagicLink(
                    expired_jwt=fx.expired_token(Role.BENEFICIARY, "beneficiary@mail.com"),
                    target_route=FrontRoute.CONVENTION_TO_SIGN,
                )
            )

        assert exc_info.value.code == "convention_not_found"
