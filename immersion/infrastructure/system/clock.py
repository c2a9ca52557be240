from datetime import UTC, datetime

from immersion.domain.shared.port.clock import Clock


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(UTC)
