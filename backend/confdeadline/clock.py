from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Timezone-aware current time (record timestamps)."""
        ...

    def today(self) -> date:
        """Local calendar date (upcoming/past classification)."""
        ...


@dataclass(frozen=True)
class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return date.today()


@dataclass(frozen=True)
class FixedClock:
    """테스트용 고정 시계"""

    fixed_time: datetime

    def now(self) -> datetime:
        if self.fixed_time.tzinfo is None:
            return self.fixed_time.replace(tzinfo=timezone.utc)
        return self.fixed_time

    def today(self) -> date:
        return self.fixed_time.date()
