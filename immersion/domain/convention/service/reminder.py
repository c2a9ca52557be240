"""Manual reminders and signature requests sent to convention actors."""

import logging
from datetime import datetime, timedelta

from immersion.config import Config
from immersion.domain.agency.port.repository import AgencyRepository
from immersion.domain.auth.model.credential import Credential
from immersion.domain.auth.model.role import SIGNATORY_ROLES, Role
from immersion.domain.auth.service.role import RoleResolver
from immersion.domain.convention.event.events import (
    AssessmentReminderManuallySent,
    ConventionSignatureLinkManuallySent,
    triggered_by,
)
from immersion.domain.convention.model.aggregate import Convention, ConventionRead
from immersion.domain.convention.model.value import ConventionId, ConventionStatus
from immersion.domain.convention.port.repository import AssessmentRepository, ConventionQueries
from immersion.domain.link.model.value import FrontRoute, LinkLifetime
from immersion.domain.link.service.magic_link import MagicLinkService
from immersion.domain.link.service.short_link import ShortLinkService
from immersion.domain.notification.model.notification import (
    FollowedIds,
    Notification,
    NotificationKind,
    TemplateKind,
)
from immersion.domain.notification.service.notification import (
    NotificationBatchResult,
    NotificationService,
)
from immersion.domain.notification.service.throttle import ReminderThrottle
from immersion.domain.shared.error import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from immersion.domain.shared.model.phone import is_valid_mobile_phone
from immersion.domain.shared.outbox import Outbox
from immersion.domain.shared.service import Service

logger = logging.getLogger(__name__)

SIGNATURE_LINK_STATUSES = frozenset(
    {ConventionStatus.READY_TO_SIGN, ConventionStatus.PARTIALLY_SIGNED}
)

# An assessment link can be sent from the day before the immersion ends.
ASSESSMENT_LINK_LEAD_TIME = timedelta(days=1)


def _followed_ids(convention: Convention) -> FollowedIds:
    return FollowedIds(
        convention_id=convention.id,
        agency_id=convention.agency_id,
        establishment_siret=convention.siret or None,
    )


def _assert_mobile_phone(phone: str, role: Role) -> None:
    if not is_valid_mobile_phone(phone):
        raise ValidationError(
            f"Phone number of {role} is not a valid mobile number",
            field="phone",
            code="invalid_mobile_phone_number",
        )


class ReminderService(Service):
    convention_queries: ConventionQueries
    agency_repo: AgencyRepository
    assessment_repo: AssessmentRepository
    role_resolver: RoleResolver
    magic_links: MagicLinkService
    short_links: ShortLinkService
    notifications: NotificationService
    throttle: ReminderThrottle
    outbox: Outbox
    config: Config

    async def _get_convention(self, convention_id: ConventionId) -> ConventionRead:
        convention = await self.convention_queries.get_convention_by_id(convention_id)
        if convention is None:
            raise NotFoundError(
                f"Convention not found: {convention_id}", code="convention_not_found"
            )
        return convention

    async def _assert_agency_actor(
        self, credential: Credential, convention: ConventionRead, denied_code: str
    ) -> None:
        agency = await self.agency_repo.get_by_id(convention.agency_id)
        if agency is None:
            raise NotFoundError(
                f"Agency not found: {convention.agency_id}", code="agency_not_found"
            )
        await self.role_resolver.assert_agency_actor(
            credential, convention, agency, denied_code=denied_code
        )

    async def send_signature_link(
        self,
        convention_id: ConventionId,
        signatory_role: Role,
        credential: Credential,
        now: datetime,
    ) -> Notification:
        """Text a signatory a short link to the signature page."""
        convention = await self._get_convention(convention_id)
        if convention.status not in SIGNATURE_LINK_STATUSES:
            raise InvalidStateError(
                f"Signature link cannot be sent for convention {convention_id} "
                f"with status {convention.status}",
                code="send_signature_link_not_allowed_for_status",
            )
        await self._assert_agency_actor(
            credential, convention, "send_signature_link_not_authorized_for_role"
        )

        signatory = (
            convention.signatories.for_role(signatory_role)
            if signatory_role in SIGNATORY_ROLES
            else None
        )
        if signatory is None:
            raise NotFoundError(
                f"Convention {convention_id} has no {signatory_role}", code="missing_actor"
            )
        _assert_mobile_phone(signatory.phone, signatory_role)
        if signatory.has_signed:
            raise ConflictError(
                f"{signatory_role} already signed convention {convention_id}",
                code="signatory_already_signed",
            )

        await self.throttle.assert_not_recently_sent(
            TemplateKind.REMINDER_FOR_SIGNATORIES,
            convention_id,
            signatory.phone,
            self.config.reminder.signature_link_cooldown_hours,
            now,
        )

        short_link = await self.short_links.make_magic_short_link(
            convention_id=convention_id,
            role=signatory_role,
            email=signatory.email,
            now=now,
            target_route=FrontRoute.CONVENTION_TO_SIGN,
            lifetime=LinkLifetime.SHORT,
            extra_query_params={"mtm_source": "sms-signature-link"},
        )
        notification = Notification(
            kind=NotificationKind.SMS,
            template_kind=TemplateKind.REMINDER_FOR_SIGNATORIES,
            recipient=signatory.phone,
            params={"short_link": short_link},
            followed_ids=_followed_ids(convention),
            created_at=now,
        )
        await self.notifications.save(notification)
        await self.outbox.append(
            ConventionSignatureLinkManuallySent(
                convention=convention.to_convention(),
                triggered_by=triggered_by(credential),
                recipient_role=signatory_role,
                created_at=now,
            )
        )
        return notification

    async def send_assessment_link(
        self, convention_id: ConventionId, credential: Credential, now: datetime
    ) -> Notification:
        """Text the establishment tutor a short link to the assessment form."""
        convention = await self._get_convention(convention_id)
        if convention.status != ConventionStatus.ACCEPTED_BY_VALIDATOR:
            raise InvalidStateError(
                f"Assessment link cannot be sent for convention {convention_id} "
                f"with status {convention.status}",
                code="assessment_link_not_allowed_for_status",
            )
        if convention.date_end > (now + ASSESSMENT_LINK_LEAD_TIME).date():
            raise InvalidStateError(
                f"Convention {convention_id} ends on {convention.date_end}, "
                "too early to request its assessment",
                code="assessment_link_too_early",
            )
        await self._assert_agency_actor(
            credential, convention, "send_assessment_link_not_authorized_for_role"
        )

        tutor = convention.establishment_tutor
        _assert_mobile_phone(tutor.phone, Role.ESTABLISHMENT_TUTOR)
        if await self.assessment_repo.get_by_convention_id(convention_id) is not None:
            raise ConflictError(
                f"Assessment already filled for convention {convention_id}",
                code="assessment_already_filled",
            )

        await self.throttle.assert_not_recently_sent(
            TemplateKind.REMINDER_FOR_ASSESSMENT,
            convention_id,
            tutor.phone,
            self.config.reminder.assessment_link_cooldown_hours,
            now,
        )

        short_link = await self.short_links.make_magic_short_link(
            convention_id=convention_id,
            role=Role.ESTABLISHMENT_TUTOR,
            email=tutor.email,
            now=now,
            target_route=FrontRoute.ASSESSMENT,
            lifetime=LinkLifetime.SHORT,
            extra_query_params={"mtm_source": "sms-assessment-link"},
        )
        notification = Notification(
            kind=NotificationKind.SMS,
            template_kind=TemplateKind.REMINDER_FOR_ASSESSMENT,
            recipient=tutor.phone,
            params={"short_link": short_link},
            followed_ids=_followed_ids(convention),
            created_at=now,
        )
        await self.notifications.save(notification)
        await self.outbox.append(
            AssessmentReminderManuallySent(
                convention=convention.to_convention(),
                triggered_by=triggered_by(credential),
                created_at=now,
            )
        )
        return notification

    async def notify_signatories(
        self, convention: Convention, now: datetime
    ) -> NotificationBatchResult:
        """Email every signatory a magic link to sign the convention again."""

        def build(role: Role) -> Notification:
            signatory = convention.signatories.for_role(role)
            if signatory is None or not signatory.email:
                raise ValidationError(
                    f"No email for {role} of convention {convention.id}",
                    field="email",
                    code="missing_actor_email",
                )
            magic_link = self.magic_links.make_convention_magic_link(
                convention_id=convention.id,
                role=role,
                email=signatory.email,
                now=now,
                target_route=FrontRoute.CONVENTION_TO_SIGN,
                lifetime=LinkLifetime.LONG,
            )
            return Notification(
                kind=NotificationKind.EMAIL,
                template_kind=TemplateKind.SIGNATORY_NEEDS_TO_SIGN,
                recipient=signatory.email,
                params={
                    "magic_link": magic_link,
                    "signatory_first_name": signatory.first_name,
                    "signatory_last_name": signatory.last_name,
                    "business_name": convention.business_name,
                },
                followed_ids=_followed_ids(convention),
                created_at=now,
            )

        roles = [signatory.role for signatory in convention.signatories.present()]
        result = await self.notifications.notify_all(roles, build)
        if result.errors:
            logger.warning(
                "Convention %s: %d signatories could not be notified: %s",
                convention.id,
                len(result.errors),
                result.errors,
            )
        return result
