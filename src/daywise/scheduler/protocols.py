"""Protocol definitions for the scheduling system."""

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """Source of the current moment."""

    def now(self) -> datetime:
        """Return the current moment as a naive UTC datetime."""
        ...
