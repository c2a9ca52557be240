from abc import abstractmethod
from typing import Protocol

from immersion.domain.agency.model.aggregate import Agency
from immersion.domain.agency.model.value import AgencyId
from immersion.domain.auth.model.user import AgencyRight
from immersion.domain.auth.model.value import UserId
from immersion.domain.shared.port import Port


class AgencyRepository(Port, Protocol):
    @abstractmethod
    async def get_by_id(self, agency_id: AgencyId) -> Agency | None: ...

    @abstractmethod
    async def get_by_ids(self, agency_ids: list[AgencyId]) -> list[Agency]: ...

    @abstractmethod
    async def get_agency_rights_by_user_id(self, user_id: UserId) -> list[AgencyRight]: ...

    @abstractmethod
    async def save(self, agency: Agency) -> None: ...
