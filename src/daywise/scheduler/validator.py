"""Input normalization: wire models to fully-populated scheduling records."""

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Any

from daywise.exceptions import ValidationError
from daywise.logger import get_logger

from .config import SchedulingConfig
from .core import Interval, PlannedTask, WorkPolicy
from .timeutils import parse_clock, parse_iso_date, parse_iso_datetime

logger = get_logger()

if TYPE_CHECKING:
    from daywise.models import ExistingEvent, Preferences, TaskInput


class TaskNormalizer:
    """Turns request objects into records the placement loop can trust.

    Every optional field is resolved here, once, so the scheduler never checks
    for absent values. All problems are collected before raising.

    Requests that went through ``ScheduleRequest`` validation already satisfy
    these checks; they only fire for tasks built without validation (e.g.
    ``TaskInput.model_construct``) and keep the placement loop safe from them.
    """

    def __init__(self, config: SchedulingConfig | None = None):
        self.config = config or SchedulingConfig()

    def normalize(self, tasks: "list[TaskInput]") -> list[PlannedTask]:
        """Normalize tasks, synthesizing ``task-<index>`` ids where missing.

        Raises:
            ValidationError: If any date is unparseable or any duration is not positive
        """
        problems: list[dict[str, Any]] = []
        planned: list[PlannedTask] = []

        for index, task in enumerate(tasks):
            task_id = task.id or f"task-{index}"
            duration = task.estimated_duration
            if duration is None:
                duration = self.config.default_duration_minutes
            elif duration <= 0:
                problems.append(
                    _problem(("tasks", index, "estimatedDuration"), "must be a positive integer")
                )

            deadline = self._parse_date(task.deadline, ("tasks", index, "deadline"), problems)
            start_date = self._parse_date(task.start_date, ("tasks", index, "startDate"), problems)

            planned.append(
                PlannedTask(
                    id=task_id,
                    title=task.title,
                    priority=task.priority,
                    duration_minutes=duration,
                    description=task.description,
                    deadline=deadline,
                    start_date=start_date,
                    dependencies=list(task.dependencies),
                )
            )

        if problems:
            raise ValidationError(f"{len(problems)} invalid task field(s)", problems)

        logger.debug(f"Normalized {len(planned)} task(s)")
        return planned

    def _parse_date(
        self,
        value: str | None,
        loc: tuple[str | int, ...],
        problems: list[dict[str, Any]],
    ) -> date | None:
        if value is None:
            return None
        try:
            return parse_iso_date(value)
        except ValueError:
            problems.append(_problem(loc, f"invalid date '{value}', expected YYYY-MM-DD"))
            return None


def normalize_events(events: "list[ExistingEvent]") -> list[Interval]:
    """Parse existing events into occupied intervals.

    Validated ``ExistingEvent`` models never fail here; the checks cover events
    built without validation.

    Raises:
        ValidationError: If a datetime is unparseable or an event ends before it starts
    """
    problems: list[dict[str, Any]] = []
    intervals: list[Interval] = []

    for index, event in enumerate(events):
        try:
            start = parse_iso_datetime(event.start_time)
            end = parse_iso_datetime(event.end_time)
        except ValueError as e:
            problems.append(_problem(("existingEvents", index), str(e)))
            continue
        if end < start:
            problems.append(
                _problem(("existingEvents", index, "endTime"), "must not be before startTime")
            )
            continue
        intervals.append(Interval(start=start, end=end, title=event.title))

    if problems:
        raise ValidationError(f"{len(problems)} invalid existing event(s)", problems)
    return intervals


def build_policy(preferences: "Preferences") -> WorkPolicy:
    """Parse preferences into a WorkPolicy."""
    day_start = parse_clock(preferences.working_hours.start)
    day_end = parse_clock(preferences.working_hours.end)
    policy = WorkPolicy(
        day_start=day_start,
        day_end=day_end,
        working_days=frozenset(preferences.working_days),
        buffer_minutes=preferences.break_duration,
        max_tasks_per_day=preferences.max_tasks_per_day,
        time_zone=preferences.time_zone,
    )
    if policy.is_degenerate:
        logger.warning(
            "Working preferences leave no schedulable time "
            f"(hours {preferences.working_hours.start}-{preferences.working_hours.end}, "
            f"days {sorted(policy.working_days)}); every task will be unscheduled"
        )
    return policy


def parse_reference(value: str | datetime) -> datetime:
    """Parse the reference ("now") moment of a request."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(UTC).replace(tzinfo=None)
        return value
    try:
        return parse_iso_datetime(value)
    except ValueError as e:
        raise ValidationError(
            f"Invalid startDate '{value}'", [_problem(("startDate",), str(e))]
        ) from e


def _problem(loc: tuple[str | int, ...], msg: str) -> dict[str, Any]:
    return {"loc": list(loc), "msg": msg}
