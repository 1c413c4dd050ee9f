"""Tests for the first-fit placement loop."""

from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from daywise.scheduler import Interval, Priority, SchedulingConfig, sort_tasks
from tests.conftest import MONDAY, MONDAY_8AM, assert_valid_placements, event, make_policy, task

RunSchedule = Callable[..., Any]


class TestConcreteScenarios:
    """Reference scenarios with 09:00-17:00 Monday-Friday working hours."""

    def test_single_task_on_empty_calendar(self, run_schedule: RunSchedule) -> None:
        """A task with no constraints lands at the start of Monday's working hours."""
        result = run_schedule([task("write_report")])

        assert len(result.scheduled) == 1
        placement = result.scheduled[0]
        assert placement.start == datetime(2025, 1, 6, 9, 0)
        assert placement.end == datetime(2025, 1, 6, 10, 0)
        assert placement.reasoning == "Scheduled at start of working hours on 2025-01-06"
        assert result.unscheduled == []

    def test_after_hours_reference_rolls_to_next_day(self, run_schedule: RunSchedule) -> None:
        """A reference time after working hours moves the task to the next morning."""
        result = run_schedule([task("write_report")], reference=datetime(2025, 1, 6, 18, 0))

        placement = result.scheduled[0]
        assert placement.start == datetime(2025, 1, 7, 9, 0)
        assert placement.end == datetime(2025, 1, 7, 10, 0)

    def test_first_gap_after_existing_event(self, run_schedule: RunSchedule) -> None:
        """An event at 09:00-10:00 with a 15 minute buffer pushes a task to 10:15."""
        existing = [event(MONDAY, "09:00", "10:00", "Standup")]
        result = run_schedule([task("review", 30)], existing=existing)

        placement = result.scheduled[0]
        assert placement.start == datetime(2025, 1, 6, 10, 15)
        assert placement.end == datetime(2025, 1, 6, 10, 45)
        assert placement.reasoning == "Scheduled after last event on 2025-01-06"

    def test_deadline_on_non_working_day_is_extended(self, run_schedule: RunSchedule) -> None:
        """A Saturday deadline extends to Monday instead of rejecting the task."""
        # Friday evening: the earliest start is Monday 13th, after the Saturday deadline
        result = run_schedule(
            [task("submit_form", deadline=date(2025, 1, 11))],
            reference=datetime(2025, 1, 10, 18, 0),
        )

        assert result.unscheduled == []
        placement = result.scheduled[0]
        assert placement.start == datetime(2025, 1, 13, 9, 0)
        assert placement.end == datetime(2025, 1, 13, 10, 0)

    def test_full_day_tasks_roll_one_per_day(self, run_schedule: RunSchedule) -> None:
        """Ten 8-hour tasks in an 8-hour day occupy ten consecutive working days."""
        tasks = [task(f"block_{i}", 480) for i in range(10)]
        result = run_schedule(tasks, policy=make_policy(buffer=0))

        assert len(result.scheduled) == 10
        start_days = [placement.start.date() for placement in result.scheduled]
        expected_days = [date(2025, 1, day) for day in (6, 7, 8, 9, 10, 13, 14, 15, 16, 17)]
        assert start_days == expected_days
        assert all(placement.start.hour == 9 for placement in result.scheduled)
        assert all(placement.end.hour == 17 for placement in result.scheduled)

    def test_task_longer_than_working_day_is_unscheduled(self, run_schedule: RunSchedule) -> None:
        """A 600 minute task never fits an 8-hour day and cites its deadline."""
        result = run_schedule([task("marathon", 600, deadline=date(2025, 1, 8))])

        assert result.scheduled == []
        assert len(result.unscheduled) == 1
        failure = result.unscheduled[0]
        assert failure.task_id == "marathon"
        assert failure.reason == "Could not find a 600-minute slot before deadline 2025-01-08"


class TestOrdering:
    """Tests for the deadline/priority tie-break contract."""

    def test_sort_order(self) -> None:
        """Deadlines first (earliest first), then priority, stable otherwise."""
        tasks = [
            task("a", priority=Priority.LOW),
            task("b", priority=Priority.HIGH),
            task("c", priority=Priority.MEDIUM, deadline=date(2025, 1, 10)),
            task("d", priority=Priority.HIGH, deadline=date(2025, 1, 8)),
            task("e", priority=Priority.LOW, deadline=date(2025, 1, 8)),
            task("f", priority=Priority.MEDIUM),
            task("g", priority=Priority.HIGH),
        ]

        ordered = [t.id for t in sort_tasks(tasks)]

        assert ordered == ["d", "e", "c", "b", "g", "f", "a"]

    def test_equal_deadline_falls_back_to_priority(self) -> None:
        """Equal deadlines are ordered by priority, not input order."""
        tasks = [
            task("low", priority=Priority.LOW, deadline=date(2025, 1, 8)),
            task("high", priority=Priority.HIGH, deadline=date(2025, 1, 8)),
        ]

        assert [t.id for t in sort_tasks(tasks)] == ["high", "low"]

    def test_placement_follows_sort_order(self, run_schedule: RunSchedule) -> None:
        """The deadline task is placed first even when listed last."""
        tasks = [
            task("someday", priority=Priority.HIGH),
            task("urgent", priority=Priority.LOW, deadline=date(2025, 1, 7)),
        ]

        result = run_schedule(tasks)

        by_id = {p.task_id: p for p in result.scheduled}
        assert by_id["urgent"].start == datetime(2025, 1, 6, 9, 0)
        assert by_id["someday"].start == datetime(2025, 1, 6, 10, 15)
        assert [p.task_id for p in result.scheduled] == ["urgent", "someday"]

    def test_dependencies_are_not_enforced(self, run_schedule: RunSchedule) -> None:
        """A task placed before the task it depends on is accepted as-is."""
        first = task("setup", priority=Priority.LOW)
        second = task("deploy", priority=Priority.HIGH)
        second.dependencies = ["setup"]

        result = run_schedule([first, second])

        assert [p.task_id for p in result.scheduled] == ["deploy", "setup"]


class TestPlacement:
    """Tests for gap selection and window handling."""

    def test_gap_before_event_is_first_fit(self, run_schedule: RunSchedule) -> None:
        """The earliest adequate gap is used, not the best-sized one."""
        existing = [event(MONDAY, "11:00", "12:00", "Design review")]
        result = run_schedule([task("email", 60)], existing=existing)

        placement = result.scheduled[0]
        assert placement.start == datetime(2025, 1, 6, 9, 0)
        assert placement.reasoning == (
            "Scheduled in available 105-minute slot before 'Design review' on 2025-01-06"
        )

    def test_exact_fit_is_accepted(self, run_schedule: RunSchedule) -> None:
        """A gap exactly as long as the task (after buffer) is a fit."""
        existing = [event(MONDAY, "10:15", "12:00")]
        result = run_schedule([task("email", 60)], existing=existing)

        assert result.scheduled[0].start == datetime(2025, 1, 6, 9, 0)
        assert result.scheduled[0].end == datetime(2025, 1, 6, 10, 0)

    def test_later_tasks_see_earlier_placements(self, run_schedule: RunSchedule) -> None:
        """Placements become busy time, buffered like existing events."""
        result = run_schedule([task("one", 60), task("two", 60), task("three", 60)])

        starts = [p.start.time().isoformat(timespec="minutes") for p in result.scheduled]
        assert starts == ["09:00", "10:15", "11:30"]

    def test_start_never_precedes_reference(self, run_schedule: RunSchedule) -> None:
        """A mid-morning reference clamps the first day's cursor."""
        result = run_schedule([task("email", 60)], reference=datetime(2025, 1, 6, 10, 30))

        placement = result.scheduled[0]
        assert placement.start == datetime(2025, 1, 6, 10, 30)
        assert placement.reasoning == "Scheduled at earliest available time 10:30 on 2025-01-06"

    def test_start_date_delays_task(self, run_schedule: RunSchedule) -> None:
        """A task cannot start before its start date."""
        result = run_schedule([task("later", start_date=date(2025, 1, 8))])

        assert result.scheduled[0].start == datetime(2025, 1, 8, 9, 0)

    def test_start_date_in_past_uses_reference(self, run_schedule: RunSchedule) -> None:
        """A start date before the reference is ignored."""
        result = run_schedule([task("old", start_date=date(2024, 12, 1))])

        assert result.scheduled[0].start == datetime(2025, 1, 6, 9, 0)

    def test_gap_does_not_run_past_working_hours(self, run_schedule: RunSchedule) -> None:
        """An event after hours does not open a gap beyond the working-hours end."""
        existing = [
            event(MONDAY, "09:00", "16:00", "Workshop"),
            event(MONDAY, "18:00", "19:00", "Dinner"),
        ]
        result = run_schedule([task("email", 60)], existing=existing)

        assert result.scheduled[0].start == datetime(2025, 1, 7, 9, 0)

    def test_nested_events_do_not_reopen_busy_time(self, run_schedule: RunSchedule) -> None:
        """An event inside another one never moves the cursor backwards."""
        existing = [
            event(MONDAY, "09:00", "13:00", "Offsite"),
            event(MONDAY, "10:00", "11:00", "Call"),
        ]
        result = run_schedule([task("email", 60)], policy=make_policy(buffer=0), existing=existing)

        assert result.scheduled[0].start == datetime(2025, 1, 6, 13, 0)

    def test_weekend_is_skipped(self, run_schedule: RunSchedule) -> None:
        """Friday evening references land on Monday."""
        result = run_schedule([task("email")], reference=datetime(2025, 1, 10, 17, 0))

        assert result.scheduled[0].start == datetime(2025, 1, 13, 9, 0)

    def test_deadline_in_past_is_unscheduled(self, run_schedule: RunSchedule) -> None:
        """A deadline before the earliest start leaves an empty window."""
        result = run_schedule([task("late", deadline=date(2025, 1, 3))])

        assert result.scheduled == []
        assert result.unscheduled[0].reason == (
            "Could not find a 60-minute slot before deadline 2025-01-03"
        )

    def test_default_window_exhausted(self, run_schedule: RunSchedule) -> None:
        """Without a deadline, failure cites the default window."""
        config = SchedulingConfig(default_window_days=2)
        tasks = [task(f"block_{i}", 480) for i in range(4)]

        result = run_schedule(tasks, policy=make_policy(buffer=0), config=config)

        # Monday, Tuesday and Wednesday (reference + 2 days) hold one block each
        assert len(result.scheduled) == 3
        assert result.unscheduled[0].task_id == "block_3"
        assert result.unscheduled[0].reason == (
            "No available 480-minute slot found in the 2-day scheduling window"
        )


class TestDegenerateConfiguration:
    """Configurations under which nothing can be placed must still terminate."""

    def test_no_working_days(self, run_schedule: RunSchedule) -> None:
        """Empty working days reports every task as unscheduled."""
        result = run_schedule(
            [task("a"), task("b", deadline=date(2025, 1, 8))],
            policy=make_policy(days=frozenset()),
        )

        assert result.scheduled == []
        assert [u.task_id for u in result.unscheduled] == ["b", "a"]

    def test_end_before_start(self, run_schedule: RunSchedule) -> None:
        """Working hours ending before they start place nothing."""
        result = run_schedule([task("a", 30)], policy=make_policy("17:00", "09:00"))

        assert result.scheduled == []
        assert len(result.unscheduled) == 1


class TestSummary:
    """Tests for summary computation."""

    def test_workload_distribution_and_completion_date(self, run_schedule: RunSchedule) -> None:
        """Counts per start date and the latest start date are reported."""
        tasks = [task(f"block_{i}", 240) for i in range(3)]
        result = run_schedule(tasks, policy=make_policy(buffer=0))

        assert result.summary.total_tasks == 3
        assert result.summary.scheduled_count == 3
        assert result.summary.workload_distribution == {"2025-01-06": 2, "2025-01-07": 1}
        assert result.summary.estimated_completion_date == date(2025, 1, 7)

    def test_empty_run(self, run_schedule: RunSchedule) -> None:
        """No tasks yields an empty summary with no completion date."""
        result = run_schedule([])

        assert result.summary.total_tasks == 0
        assert result.summary.estimated_completion_date is None
        assert result.summary.workload_distribution == {}


class TestInvariants:
    """Property checks over a busy calendar."""

    def test_mixed_calendar_respects_all_constraints(self, run_schedule: RunSchedule) -> None:
        """Placements stay inside working hours/days and keep the buffer."""
        policy = make_policy(buffer=10)
        existing = [
            event(MONDAY, "09:30", "10:30", "Standup"),
            event(MONDAY, "12:00", "13:00", "Lunch"),
            event(MONDAY, "14:00", "14:20", "Sync"),
            event(date(2025, 1, 7), "09:00", "12:00", "Training"),
            event(date(2025, 1, 8), "16:00", "18:00", "Offsite"),
        ]
        tasks = [
            task(f"t{i}", duration, priority=priority, deadline=deadline)
            for i, (duration, priority, deadline) in enumerate(
                [
                    (45, Priority.HIGH, date(2025, 1, 7)),
                    (90, Priority.MEDIUM, None),
                    (20, Priority.LOW, None),
                    (240, Priority.HIGH, date(2025, 1, 9)),
                    (30, Priority.MEDIUM, date(2025, 1, 6)),
                    (120, Priority.LOW, None),
                    (15, Priority.HIGH, None),
                ]
            )
        ]

        result = run_schedule(tasks, policy=policy, existing=existing)

        assert len(result.scheduled) == len(tasks)
        assert_valid_placements(result, policy, existing)
        for placement in result.scheduled:
            assert placement.start >= MONDAY_8AM

    def test_existing_events_are_not_mutated(self, run_schedule: RunSchedule) -> None:
        """The caller's event list is copied on entry."""
        existing = [event(MONDAY, "09:00", "10:00")]
        snapshot = list(existing)

        run_schedule([task("a"), task("b")], existing=existing)

        assert existing == snapshot

    def test_deadline_tasks_finish_inside_window(self, run_schedule: RunSchedule) -> None:
        """Two working days hold eight two-hour tasks and no more."""
        tasks = [task(f"d{i}", 120, deadline=date(2025, 1, 7)) for i in range(8)]

        result = run_schedule(tasks, policy=make_policy(buffer=0))

        assert len(result.scheduled) == 8
        assert len(result.unscheduled) == 0
        for placement in result.scheduled:
            assert placement.end <= datetime(2025, 1, 7, 17, 0)

        overflow = run_schedule(
            [*tasks, task("late", 120, deadline=date(2025, 1, 7))],
            policy=make_policy(buffer=0),
        )
        assert [item.task_id for item in overflow.unscheduled] == ["late"]

    def test_repeat_runs_are_identical(self, run_schedule: RunSchedule) -> None:
        existing = [event(MONDAY, "10:00", "11:00", "Review")]
        tasks = [task("a", 45), task("b", 90, priority=Priority.HIGH), task("c", 30)]

        first = run_schedule(tasks, existing=existing)
        second = run_schedule(tasks, existing=existing)

        assert first == second

    def test_rerun_on_own_output_places_nothing(self, run_schedule: RunSchedule) -> None:
        """Placements fed back as events with no tasks leave an empty result."""
        first = run_schedule([task("a"), task("b", 30)])
        as_events = [Interval(p.start, p.end, p.title) for p in first.scheduled]

        second = run_schedule([], existing=as_events)

        assert second.scheduled == []
        assert second.unscheduled == []
        assert second.summary.total_tasks == 0
