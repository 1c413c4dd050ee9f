"""Core dataclasses for the scheduling system."""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any


class Priority(str, Enum):
    """Task priority levels."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort rank (lower sorts first)."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


class SlotKind(str, Enum):
    """Where in the day a placement landed."""

    START_OF_DAY = "start_of_day"
    GAP_BEFORE_EVENT = "gap_before_event"
    AFTER_LAST_EVENT = "after_last_event"


def _default_str_list() -> list[str]:
    return []


@dataclass
class PlannedTask:
    """A fully-populated task, ready for placement."""

    id: str
    title: str
    priority: Priority
    duration_minutes: int
    description: str | None = None
    deadline: date | None = None
    start_date: date | None = None
    # Accepted and carried, never used for ordering or blocking
    dependencies: list[str] = field(default_factory=_default_str_list)

    @property
    def duration(self) -> timedelta:
        return timedelta(minutes=self.duration_minutes)


@dataclass(frozen=True)
class Interval:
    """An occupied span of the timeline."""

    start: datetime
    end: datetime
    title: str = ""

    @property
    def day(self) -> date:
        """Calendar day the interval is filed under (its start date)."""
        return self.start.date()


@dataclass(frozen=True)
class SlotMatch:
    """A free slot chosen for a task on one day."""

    start: datetime
    end: datetime
    kind: SlotKind
    available_minutes: int
    before_title: str | None = None


@dataclass(frozen=True)
class TaskWindow:
    """Resolved earliest start and effective deadline for one task."""

    earliest: datetime
    latest: datetime
    has_deadline: bool

    def days(self) -> list[date]:
        """Calendar days from earliest to latest, inclusive."""
        first = self.earliest.date()
        count = (self.latest.date() - first).days + 1
        return [first + timedelta(days=offset) for offset in range(max(count, 0))]


@dataclass
class Placement:
    """A task that has been placed on the timeline."""

    task_id: str
    title: str
    start: datetime
    end: datetime
    priority: Priority
    reasoning: str
    description: str | None = None


@dataclass
class UnscheduledTask:
    """A task whose window held no fitting slot."""

    task_id: str
    title: str
    reason: str


@dataclass
class ScheduleSummary:
    """Aggregate figures over one scheduling run."""

    total_tasks: int
    scheduled_count: int
    estimated_completion_date: date | None
    workload_distribution: dict[str, int]


@dataclass
class SchedulingResult:
    """Complete result of one scheduling run."""

    scheduled: list[Placement]
    unscheduled: list[UnscheduledTask]
    summary: ScheduleSummary
    warnings: list[str] = field(default_factory=_default_str_list)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WorkPolicy:
    """Parsed working-hours preferences used by the placement loop."""

    day_start: time
    day_end: time
    working_days: frozenset[str]
    buffer_minutes: int = 15
    max_tasks_per_day: int | None = None  # Advisory only, never enforced
    time_zone: str = "UTC"  # Metadata only, no conversion performed

    @property
    def buffer(self) -> timedelta:
        return timedelta(minutes=self.buffer_minutes)

    @property
    def is_degenerate(self) -> bool:
        """True when no task can ever be placed under this policy."""
        return not self.working_days or self.day_end <= self.day_start
