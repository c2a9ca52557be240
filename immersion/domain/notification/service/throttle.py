"""Cool-down between two identical reminders."""

import logging
import math
from datetime import datetime, timedelta

from immersion.domain.notification.model.notification import TemplateKind
from immersion.domain.notification.port.repository import NotificationRepository
from immersion.domain.shared.error import ThrottledError
from immersion.domain.shared.service import Service

logger = logging.getLogger(__name__)


def format_time_remaining(remaining: timedelta) -> str:
    """Format as ``<h>h<mm>``, rounding up to the next minute (e.g. ``22h00``)."""
    total_minutes = math.ceil(remaining.total_seconds() / 60)
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}h{minutes:02d}"


class ReminderThrottle(Service):
    _repo: NotificationRepository

    async def assert_not_recently_sent(
        self,
        template_kind: TemplateKind,
        convention_id: str,
        recipient: str,
        cooldown_hours: int,
        now: datetime,
    ) -> None:
        """Refuse a reminder if the same one reached ``recipient`` less than ``cooldown_hours`` ago.

        Raises:
            ThrottledError: with the remaining wait time
        """
        last = await self._repo.get_last_notification(template_kind, convention_id, recipient)
        if last is None:
            return

        cooldown = timedelta(hours=cooldown_hours)
        if last.created_at > now - cooldown:
            time_remaining = format_time_remaining(last.created_at + cooldown - now)
            logger.info(
                "%s for convention %s throttled, %s remaining",
                template_kind,
                convention_id,
                time_remaining,
            )
            raise ThrottledError(
                f"A {template_kind} was already sent for convention {convention_id} "
                f"less than {cooldown_hours}h ago, retry in {time_remaining}",
                time_remaining=time_remaining,
                min_hours_between_reminder=cooldown_hours,
            )
