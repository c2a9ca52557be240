from datetime import datetime
from enum import StrEnum
from typing import Any, NewType
from uuid import uuid4

from pydantic import Field

from immersion.domain.shared.model.entity import Entity
from immersion.domain.shared.model.value import ValueObject

NotificationId = NewType("NotificationId", str)


def new_notification_id() -> NotificationId:
    return NotificationId(str(uuid4()))


class NotificationKind(StrEnum):
    EMAIL = "email"
    SMS = "sms"


class TemplateKind(StrEnum):
    REMINDER_FOR_SIGNATORIES = "ReminderForSignatories"
    REMINDER_FOR_ASSESSMENT = "ReminderForAssessment"
    SIGNATORY_NEEDS_TO_SIGN = "SignatoryNeedsToSignAfterModification"
    MAGIC_LINK_RENEWAL = "MagicLinkRenewal"


class FollowedIds(ValueObject):
    """Business objects a notification relates to, used to look notifications up."""

    convention_id: str | None = None
    agency_id: str | None = None
    establishment_siret: str | None = None
    user_id: str | None = None


class Notification(Entity):
    id: NotificationId = Field(default_factory=new_notification_id)
    kind: NotificationKind
    template_kind: TemplateKind
    recipient: str  # email address or phone number, depending on kind
    params: dict[str, Any] = Field(default_factory=dict)
    followed_ids: FollowedIds = FollowedIds()
    created_at: datetime
