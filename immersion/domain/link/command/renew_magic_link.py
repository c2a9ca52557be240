"""Send a fresh magic link to the holder of an expired one."""

import logfire

from immersion.domain.agency.port.repository import AgencyRepository
from immersion.domain.auth.model.credential import make_email_hash
from immersion.domain.auth.model.role import SIGNATORY_ROLES, Role
from immersion.domain.auth.port.repository import UserRepository
from immersion.domain.auth.service.token import TokenService
from immersion.domain.convention.model.aggregate import ConventionRead
from immersion.domain.convention.port.repository import ConventionQueries
from immersion.domain.link.event.events import MagicLinkRenewalRequested
from immersion.domain.link.model.value import FrontRoute, LinkLifetime
from immersion.domain.link.service.magic_link import MagicLinkService
from immersion.domain.notification.model.notification import (
    FollowedIds,
    Notification,
    NotificationKind,
    TemplateKind,
)
from immersion.domain.notification.service.notification import NotificationService
from immersion.domain.shared.authorization.gate import public
from immersion.domain.shared.command import Command, CommandHandler, Result
from immersion.domain.shared.error import AuthorizationError, NotFoundError, ValidationError
from immersion.domain.shared.outbox import Outbox
from immersion.domain.shared.port.clock import Clock

RENEWABLE_ROUTES = frozenset(FrontRoute)


class RenewConventionMagicLink(Command):
    expired_jwt: str
    target_route: str


class MagicLinkRenewed(Result):
    convention_id: str
    sent: int


class RenewConventionMagicLinkHandler(CommandHandler[RenewConventionMagicLink, MagicLinkRenewed]):
    __auth__ = public()
    token_service: TokenService
    magic_links: MagicLinkService
    convention_queries: ConventionQueries
    agency_repo: AgencyRepository
    user_repo: UserRepository
    notifications: NotificationService
    outbox: Outbox
    clock: Clock

    async def run(self, cmd: RenewConventionMagicLink) -> MagicLinkRenewed:
        if cmd.target_route not in RENEWABLE_ROUTES:
            raise ValidationError(
                f"Route {cmd.target_route} does not accept renewed links",
                field="target_route",
                code="unsupported_renewal_route",
            )
        route = FrontRoute(cmd.target_route)

        with logfire.span("RenewConventionMagicLink", route=route):
            payload = self.token_service.decode_convention_token_ignoring_expiry(cmd.expired_jwt)
            convention = await self.convention_queries.get_convention_by_id(payload.convention_id)
            if convention is None:
                raise NotFoundError(
                    f"Convention not found: {payload.convention_id}",
                    code="convention_not_found",
                )

            emails = [
                email
                for email in await self._emails_for_role(convention, payload.role)
                if make_email_hash(email) == payload.email_hash
            ]
            if not emails:
                raise AuthorizationError(
                    f"No {payload.role} of convention {convention.id} matches this link",
                    code="forbidden_missing_rights",
                )

            now = self.clock.now()
            for email in emails:
                magic_link = self.magic_links.make_convention_magic_link(
                    convention_id=convention.id,
                    role=payload.role,
                    email=email,
                    now=now,
                    target_route=route,
                    lifetime=LinkLifetime.LONG,
                )
                await self.notifications.save(
                    Notification(
                        kind=NotificationKind.EMAIL,
                        template_kind=TemplateKind.MAGIC_LINK_RENEWAL,
                        recipient=email,
                        params={"magic_link": magic_link, "convention_id": convention.id},
                        followed_ids=FollowedIds(
                            convention_id=convention.id, agency_id=convention.agency_id
                        ),
                        created_at=now,
                    )
                )
            await self.outbox.append(
                MagicLinkRenewalRequested(
                    convention_id=convention.id,
                    role=payload.role,
                    target_route=route,
                    created_at=now,
                )
            )
            logfire.info(
                "Magic link renewed", convention_id=convention.id, role=payload.role
            )
            return MagicLinkRenewed(convention_id=convention.id, sent=len(emails))

    async def _emails_for_role(self, convention: ConventionRead, role: Role) -> list[str]:
        if role in SIGNATORY_ROLES:
            signatory = convention.signatories.for_role(role)
            return [signatory.email] if signatory is not None else []
        if role == Role.ESTABLISHMENT_TUTOR:
            return [convention.establishment_tutor.email]
        if role in (Role.COUNSELLOR, Role.VALIDATOR):
            agency = await self.agency_repo.get_by_id(convention.agency_id)
            if agency is None:
                raise NotFoundError(
                    f"Agency not found: {convention.agency_id}", code="agency_not_found"
                )
            users = await self.user_repo.get_by_ids(agency.user_ids_with_role(role))
            return [user.email for user in users]
        raise AuthorizationError(
            f"Links issued for role {role} cannot be renewed", code="role_not_renewable"
        )
