from abc import abstractmethod
from datetime import datetime
from enum import StrEnum
from typing import Protocol

from immersion.domain.convention.model.aggregate import Convention, ConventionRead
from immersion.domain.convention.model.assessment import Assessment
from immersion.domain.convention.model.value import ConventionId
from immersion.domain.shared.port import Port


class UpdateOutcome(StrEnum):
    UPDATED = "updated"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"  # stored updated_at differs from the expected one


class ConventionRepository(Port, Protocol):
    @abstractmethod
    async def get_by_id(self, convention_id: ConventionId) -> Convention | None: ...

    @abstractmethod
    async def save(self, convention: Convention) -> None: ...

    @abstractmethod
    async def update(
        self, convention: Convention, *, expected_updated_at: datetime
    ) -> UpdateOutcome:
        """Replace the stored convention if it was not modified since ``expected_updated_at``."""
        ...


class ConventionQueries(Port, Protocol):
    @abstractmethod
    async def get_convention_by_id(self, convention_id: ConventionId) -> ConventionRead | None: ...


class AssessmentRepository(Port, Protocol):
    @abstractmethod
    async def get_by_convention_id(self, convention_id: ConventionId) -> Assessment | None: ...

    @abstractmethod
    async def save(self, assessment: Assessment) -> None: ...
