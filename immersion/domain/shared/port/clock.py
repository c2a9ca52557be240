from abc import abstractmethod
from datetime import datetime
from typing import Protocol

from immersion.domain.shared.port import Port


class Clock(Port, Protocol):
    """Source of the current instant (timezone-aware, UTC)."""

    @abstractmethod
    def now(self) -> datetime: ...
