"""Per-task scheduling window resolution."""

from datetime import datetime, time, timedelta

from daywise.logger import get_logger

from .config import SchedulingConfig
from .core import PlannedTask, TaskWindow, WorkPolicy
from .timeutils import at_clock, next_working_day

logger = get_logger()


def resolve_window(
    task: PlannedTask,
    reference: datetime,
    policy: WorkPolicy,
    config: SchedulingConfig | None = None,
) -> TaskWindow | None:
    """Resolve the earliest start and effective deadline for a task.

    The lower bound is the later of the task's start date and ``reference``. A
    lower bound at or after the end of working hours moves to the start of the
    next day, then rolls forward to a working day. The upper bound is the
    deadline, or ``default_window_days`` after the lower bound; a non-working
    upper bound is extended to the next working day and snapped to the end of
    working hours.

    Returns:
        The window, or None if no working day is reachable within the
        roll-forward cap (e.g. no working days configured)
    """
    config = config or SchedulingConfig()
    cap = config.max_rollforward_days

    base = reference
    if task.start_date is not None:
        base = max(datetime.combine(task.start_date, time.min), reference)

    lower = base
    if lower.time() >= policy.day_end:
        lower = at_clock(lower.date() + timedelta(days=1), policy.day_start)

    earliest = next_working_day(lower, policy.working_days, policy.day_start, cap)
    if earliest is None:
        logger.debug(f"    {task.id}: no working day within {cap} days of {lower.date()}")
        return None

    if task.deadline is not None:
        upper = datetime.combine(task.deadline, time.min)
    else:
        upper = base + timedelta(days=config.default_window_days)

    rolled_upper = next_working_day(upper, policy.working_days, policy.day_start, cap)
    if rolled_upper is None:
        return None
    if rolled_upper.date() != upper.date():
        logger.debug(
            f"    {task.id}: deadline {upper.date()} is not a working day, "
            f"extended to {rolled_upper.date()}"
        )

    return TaskWindow(
        earliest=earliest,
        latest=at_clock(rolled_upper.date(), policy.day_end),
        has_deadline=task.deadline is not None,
    )
