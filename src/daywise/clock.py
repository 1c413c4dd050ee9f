"""Clock implementations for injecting "now"."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta


class SystemClock:
    """Reads the wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC).replace(tzinfo=None)


@dataclass
class FixedClock:
    """Always returns the same moment until advanced."""

    moment: datetime

    def now(self) -> datetime:
        return self.moment

    def advance(self, seconds: float) -> None:
        self.moment = self.moment + timedelta(seconds=seconds)
