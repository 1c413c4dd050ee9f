"""Scheduler package - first-fit placement of tasks into working hours.

Main entry points:
- FirstFitScheduler: Places normalized tasks around an occupied timeline
- TaskNormalizer: Resolves optional task fields before placement
- resolve_window: Earliest start and effective deadline for one task
- find_first_fit / find_free_windows: Gap finding within one working day

Configuration:
- SchedulingConfig: Algorithm knobs (default duration, window, caps)
- WorkPolicy: Parsed working hours, days and buffer
"""

from .config import SchedulingConfig
from .core import (
    Interval,
    Placement,
    PlannedTask,
    Priority,
    ScheduleSummary,
    SchedulingResult,
    SlotKind,
    SlotMatch,
    TaskWindow,
    UnscheduledTask,
    WorkPolicy,
)
from .first_fit import FirstFitScheduler, sort_tasks, summarize
from .gaps import FreeWindow, find_first_fit, find_free_windows, merge_intervals
from .protocols import Clock
from .validator import TaskNormalizer, build_policy, normalize_events, parse_reference
from .windows import resolve_window

__all__ = [
    # Core dataclasses
    "Interval",
    "Placement",
    "PlannedTask",
    "Priority",
    "ScheduleSummary",
    "SchedulingResult",
    "SlotKind",
    "SlotMatch",
    "TaskWindow",
    "UnscheduledTask",
    "WorkPolicy",
    # Configuration
    "SchedulingConfig",
    # Protocols
    "Clock",
    # Algorithm
    "FirstFitScheduler",
    "sort_tasks",
    "summarize",
    "resolve_window",
    # Gap finding
    "FreeWindow",
    "find_first_fit",
    "find_free_windows",
    "merge_intervals",
    # Input normalization
    "TaskNormalizer",
    "build_policy",
    "normalize_events",
    "parse_reference",
]
