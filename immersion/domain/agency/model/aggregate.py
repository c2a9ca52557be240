from pydantic import Field

from immersion.domain.agency.model.value import AgencyId, AgencyKind, AgencyStatus
from immersion.domain.auth.model.role import AgencyRole, Role
from immersion.domain.auth.model.value import UserId
from immersion.domain.shared.model.aggregate import Aggregate
from immersion.domain.shared.model.value import ValueObject


class AgencyUserRight(ValueObject):
    roles: list[AgencyRole]
    is_notified_by_email: bool = False


class Agency(Aggregate):
    """An oversight agency.

    A delegating agency refers to another agency by id: its counsellors
    pre-validate conventions before the referred agency's validators decide.
    """

    id: AgencyId
    name: str
    kind: AgencyKind = AgencyKind.AUTRE
    department: str = ""
    status: AgencyStatus = AgencyStatus.ACTIVE
    refers_to_agency_id: AgencyId | None = None
    users_rights: dict[UserId, AgencyUserRight] = Field(default_factory=dict)

    def user_ids_with_role(self, *roles: Role) -> list[UserId]:
        wanted = {Role(role) for role in roles}
        return [
            user_id
            for user_id, right in self.users_rights.items()
            if any(role.as_role() in wanted for role in right.roles)
        ]
