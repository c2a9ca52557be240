from immersion.domain.auth.model.role import Role
from immersion.domain.link.model.value import FrontRoute
from immersion.domain.shared.event import Event


class MagicLinkRenewalRequested(Event):
    """A fresh magic link was sent to replace an expired one."""

    convention_id: str
    role: Role
    target_route: FrontRoute
