"""Pytest configuration and fixtures for daywise tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, time
from typing import Any

import pytest

from daywise.logger import reset_logger
from daywise.scheduler import (
    FirstFitScheduler,
    Interval,
    PlannedTask,
    Priority,
    SchedulingConfig,
    SchedulingResult,
    WorkPolicy,
)
from daywise.scheduler.timeutils import weekday_name

# 2025-01-06 is a Monday
MONDAY = date(2025, 1, 6)
MONDAY_8AM = datetime(2025, 1, 6, 8, 0)

WEEKDAYS = frozenset({"monday", "tuesday", "wednesday", "thursday", "friday"})


@pytest.fixture(autouse=True)
def clean_logger() -> None:
    """Reset the daywise logger before each test for isolation."""
    reset_logger()


def make_policy(
    start: str = "09:00",
    end: str = "17:00",
    *,
    days: frozenset[str] = WEEKDAYS,
    buffer: int = 15,
    max_tasks_per_day: int | None = 8,
) -> WorkPolicy:
    """Build a WorkPolicy from HH:MM strings."""
    start_h, start_m = (int(part) for part in start.split(":"))
    end_h, end_m = (int(part) for part in end.split(":"))
    return WorkPolicy(
        day_start=time(start_h, start_m),
        day_end=time(end_h, end_m),
        working_days=days,
        buffer_minutes=buffer,
        max_tasks_per_day=max_tasks_per_day,
    )


def task(
    task_id: str,
    duration: int = 60,
    *,
    priority: Priority = Priority.MEDIUM,
    deadline: date | None = None,
    start_date: date | None = None,
    title: str | None = None,
) -> PlannedTask:
    """Create a PlannedTask with sensible defaults."""
    return PlannedTask(
        id=task_id,
        title=title or task_id.replace("_", " ").title(),
        priority=priority,
        duration_minutes=duration,
        deadline=deadline,
        start_date=start_date,
    )


def event(day: date, start: str, end: str, title: str = "Event") -> Interval:
    """Create an occupied interval on ``day`` from HH:MM strings."""
    return Interval(
        start=datetime.fromisoformat(f"{day.isoformat()}T{start}"),
        end=datetime.fromisoformat(f"{day.isoformat()}T{end}"),
        title=title,
    )


@pytest.fixture
def run_schedule() -> Callable[..., SchedulingResult]:
    """Factory that runs FirstFitScheduler with defaults for the Monday 08:00 scenario."""

    def _run(
        tasks: list[PlannedTask],
        *,
        policy: WorkPolicy | None = None,
        reference: datetime = MONDAY_8AM,
        existing: list[Interval] | None = None,
        config: SchedulingConfig | None = None,
    ) -> SchedulingResult:
        scheduler = FirstFitScheduler(
            tasks,
            policy or make_policy(),
            reference,
            existing or [],
            config=config,
        )
        return scheduler.schedule()

    return _run


def assert_valid_placements(
    result: SchedulingResult,
    policy: WorkPolicy,
    existing: list[Interval] | None = None,
) -> None:
    """Assert containment and no-overlap properties for every placement.

    - Each placement lies inside the working window of a working day
    - No two intervals filed under the same day come closer than the buffer
    """
    for placement in result.scheduled:
        day = placement.start.date()
        assert weekday_name(day) in policy.working_days, f"{placement.task_id} on {day}"
        assert placement.end.date() == day
        assert placement.start.time() >= policy.day_start
        assert placement.end.time() <= policy.day_end

    by_day: dict[date, list[Any]] = {}
    for interval in existing or []:
        by_day.setdefault(interval.day, []).append((interval.start, interval.end, interval.title))
    for placement in result.scheduled:
        by_day.setdefault(placement.start.date(), []).append(
            (placement.start, placement.end, placement.task_id)
        )

    for day, spans in by_day.items():
        placed_ids = {p.task_id for p in result.scheduled}
        for i, (start1, end1, name1) in enumerate(spans):
            for start2, end2, name2 in spans[i + 1 :]:
                # Pairs of input events are not the scheduler's responsibility
                if name1 not in placed_ids and name2 not in placed_ids:
                    continue
                gap_ok = start2 >= end1 + policy.buffer or start1 >= end2 + policy.buffer
                assert gap_ok, f"{name1} and {name2} conflict on {day}"
