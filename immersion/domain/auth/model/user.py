from pydantic import Field

from immersion.domain.auth.model.role import AgencyRole
from immersion.domain.auth.model.value import UserId
from immersion.domain.shared.model.aggregate import Aggregate
from immersion.domain.shared.model.value import ValueObject


class User(Aggregate):
    id: UserId
    email: str
    first_name: str = ""
    last_name: str = ""
    is_backoffice_admin: bool = False


class AgencyRight(ValueObject):
    """Roles a user holds on one agency."""

    agency_id: str
    roles: list[AgencyRole]
    is_notified_by_email: bool = False


class UserWithRights(User):
    agency_rights: list[AgencyRight] = Field(default_factory=list)

    def right_on(self, agency_id: str) -> AgencyRight | None:
        return next((right for right in self.agency_rights if right.agency_id == agency_id), None)
