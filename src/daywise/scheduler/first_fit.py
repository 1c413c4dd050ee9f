"""Greedy first-fit placement of tasks onto a calendar timeline."""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime

from daywise.logger import changes_enabled, checks_enabled, debug_enabled, get_logger

from .config import SchedulingConfig
from .core import (
    Interval,
    Placement,
    PlannedTask,
    ScheduleSummary,
    SchedulingResult,
    SlotKind,
    SlotMatch,
    TaskWindow,
    UnscheduledTask,
    WorkPolicy,
)
from .gaps import find_first_fit
from .timeutils import at_clock, weekday_name
from .windows import resolve_window

logger = get_logger()


def sort_tasks(tasks: Iterable[PlannedTask]) -> list[PlannedTask]:
    """Order tasks for placement.

    Tasks with a deadline come first, earliest deadline first. Ties and tasks
    without a deadline fall back to priority (high, medium, low). The sort is
    stable, so input order breaks any remaining tie.
    """
    return sorted(
        tasks,
        key=lambda task: (
            task.deadline is None,
            task.deadline or date.min,
            task.priority.rank,
        ),
    )


def summarize(total_tasks: int, placements: list[Placement]) -> ScheduleSummary:
    """Count placements per start date and find the latest start date."""
    distribution: dict[str, int] = defaultdict(int)
    for placement in placements:
        distribution[placement.start.date().isoformat()] += 1

    latest = max((placement.start.date() for placement in placements), default=None)
    return ScheduleSummary(
        total_tasks=total_tasks,
        scheduled_count=len(placements),
        estimated_completion_date=latest,
        workload_distribution=dict(sorted(distribution.items())),
    )


class FirstFitScheduler:
    """Places tasks one at a time into the earliest gap that fits.

    This scheduler:
    1. Sorts tasks by deadline, then priority
    2. Resolves each task's window (earliest start, effective deadline)
    3. Walks the window day by day and takes the first gap long enough
    4. Adds each placement to its timeline so later tasks treat it as busy

    Placement is greedy: an earlier placement is never moved to make room for a
    later task.
    """

    def __init__(
        self,
        tasks: list[PlannedTask],
        policy: WorkPolicy,
        reference: datetime,
        existing: Iterable[Interval] = (),
        *,
        config: SchedulingConfig | None = None,
    ):
        """Initialize the scheduler.

        Args:
            tasks: Normalized tasks to place
            policy: Working hours, days and buffer
            reference: The "now" used to bound every task's window
            existing: Already-occupied intervals (copied, never mutated)
            config: Optional algorithm configuration
        """
        self.tasks = list(tasks)
        self.policy = policy
        self.reference = reference
        self.config = config or SchedulingConfig()

        self._timeline: dict[date, list[Interval]] = defaultdict(list)
        for interval in existing:
            self._timeline[interval.day].append(interval)

    def schedule(self) -> SchedulingResult:
        """Run placement for every task.

        Returns:
            SchedulingResult with placements, failures and summary
        """
        placements: list[Placement] = []
        unscheduled: list[UnscheduledTask] = []

        for task in sort_tasks(self.tasks):
            if checks_enabled():
                logger.checks(
                    f"Considering {task.id} '{task.title}' "
                    f"({task.duration_minutes} min, {task.priority.value}, "
                    f"deadline={task.deadline}, start={task.start_date})"
                )

            window = resolve_window(task, self.reference, self.policy, self.config)
            placement = self._place(task, window) if window is not None else None

            if placement is None:
                failure = UnscheduledTask(
                    task_id=task.id, title=task.title, reason=self._failure_reason(task)
                )
                unscheduled.append(failure)
                if changes_enabled():
                    logger.changes(f"Unscheduled {task.id}: {failure.reason}")
                continue

            placements.append(placement)
            self._timeline[placement.start.date()].append(
                Interval(placement.start, placement.end, placement.title)
            )
            if changes_enabled():
                logger.changes(
                    f"Scheduled {task.id} '{task.title}' "
                    f"{placement.start.isoformat()} - {placement.end.time().isoformat()}"
                )

        return SchedulingResult(
            scheduled=placements,
            unscheduled=unscheduled,
            summary=summarize(len(self.tasks), placements),
            metadata={"algorithm": "first_fit", "reference": self.reference.isoformat()},
        )

    def _place(self, task: PlannedTask, window: TaskWindow) -> Placement | None:
        for day in window.days():
            if weekday_name(day) not in self.policy.working_days:
                continue

            work_start = at_clock(day, self.policy.day_start)
            work_end = at_clock(day, self.policy.day_end)
            occupied = self._timeline.get(day, [])
            if debug_enabled():
                logger.debug(f"    {day}: {len(occupied)} occupied interval(s)")
            match = find_first_fit(
                occupied,
                work_start,
                work_end,
                task.duration,
                self.policy.buffer,
                earliest=window.earliest,
            )
            if match is None:
                logger.checks(f"  {day}: no {task.duration_minutes}-minute gap")
                continue

            return Placement(
                task_id=task.id,
                title=task.title,
                start=match.start,
                end=match.end,
                priority=task.priority,
                reasoning=self._reasoning(match, work_start, day),
                description=task.description,
            )
        return None

    def _reasoning(self, match: SlotMatch, work_start: datetime, day: date) -> str:
        if match.kind == SlotKind.GAP_BEFORE_EVENT:
            return (
                f"Scheduled in available {match.available_minutes}-minute slot "
                f"before '{match.before_title}' on {day.isoformat()}"
            )
        if match.kind == SlotKind.AFTER_LAST_EVENT:
            return f"Scheduled after last event on {day.isoformat()}"
        if match.start == work_start:
            return f"Scheduled at start of working hours on {day.isoformat()}"
        return (
            f"Scheduled at earliest available time {match.start.strftime('%H:%M')} "
            f"on {day.isoformat()}"
        )

    def _failure_reason(self, task: PlannedTask) -> str:
        if task.deadline is not None:
            return (
                f"Could not find a {task.duration_minutes}-minute slot "
                f"before deadline {task.deadline.isoformat()}"
            )
        return (
            f"No available {task.duration_minutes}-minute slot found in the "
            f"{self.config.default_window_days}-day scheduling window"
        )
