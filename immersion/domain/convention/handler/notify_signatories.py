import logfire

from immersion.domain.convention.event.events import ConventionSubmittedAfterModification
from immersion.domain.convention.service.reminder import ReminderService
from immersion.domain.shared.event import EventHandler
from immersion.domain.shared.port.clock import Clock


class NotifySignatoriesThatConventionNeedsSignature(
    EventHandler[ConventionSubmittedAfterModification]
):
    """Ask every signatory to sign again once the convention content changed."""

    reminder_service: ReminderService
    clock: Clock

    async def handle(self, event: ConventionSubmittedAfterModification) -> None:
        with logfire.span(
            "NotifySignatoriesThatConventionNeedsSignature",
            convention_id=event.convention.id,
        ):
            result = await self.reminder_service.notify_signatories(
                event.convention, self.clock.now()
            )
            logfire.info(
                "Signatories notified",
                convention_id=event.convention.id,
                sent=len(result.sent),
                failed=len(result.errors),
            )
