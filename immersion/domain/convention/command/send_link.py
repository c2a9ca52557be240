"""Manual SMS reminders: signature link and assessment link."""

import logfire

from immersion.domain.auth.model.credential import Identity, require_credential
from immersion.domain.auth.model.role import Role
from immersion.domain.convention.model.value import ConventionId
from immersion.domain.convention.service.reminder import ReminderService
from immersion.domain.notification.model.notification import NotificationId
from immersion.domain.shared.authorization.gate import authenticated
from immersion.domain.shared.command import Command, CommandHandler, Result
from immersion.domain.shared.port.clock import Clock


class SendSignatureLink(Command):
    convention_id: ConventionId
    signatory_role: Role


class SendAssessmentLink(Command):
    convention_id: ConventionId


class LinkSent(Result):
    convention_id: ConventionId
    notification_id: NotificationId


class SendSignatureLinkHandler(CommandHandler[SendSignatureLink, LinkSent]):
    __auth__ = authenticated()
    identity: Identity
    reminder_service: ReminderService
    clock: Clock

    async def run(self, cmd: SendSignatureLink) -> LinkSent:
        with logfire.span(
            "SendSignatureLink", convention_id=cmd.convention_id, role=cmd.signatory_role
        ):
            notification = await self.reminder_service.send_signature_link(
                cmd.convention_id,
                cmd.signatory_role,
                require_credential(self.identity),
                self.clock.now(),
            )
            return LinkSent(convention_id=cmd.convention_id, notification_id=notification.id)


class SendAssessmentLinkHandler(CommandHandler[SendAssessmentLink, LinkSent]):
    __auth__ = authenticated()
    identity: Identity
    reminder_service: ReminderService
    clock: Clock

    async def run(self, cmd: SendAssessmentLink) -> LinkSent:
        with logfire.span("SendAssessmentLink", convention_id=cmd.convention_id):
            notification = await self.reminder_service.send_assessment_link(
                cmd.convention_id, require_credential(self.identity), self.clock.now()
            )
            return LinkSent(convention_id=cmd.convention_id, notification_id=notification.id)
