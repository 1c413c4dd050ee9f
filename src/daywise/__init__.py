"""Daywise - deterministic placement of tasks into working hours."""

from .exceptions import ConfigError, DaywiseError, ValidationError
from .models import (
    ExistingEvent,
    Preferences,
    ScheduleRequest,
    ScheduleResponse,
    TaskInput,
    WorkingHours,
)
from .service import SchedulingService, schedule

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DaywiseError",
    "ExistingEvent",
    "Preferences",
    "ScheduleRequest",
    "ScheduleResponse",
    "SchedulingService",
    "TaskInput",
    "ValidationError",
    "WorkingHours",
    "schedule",
]
