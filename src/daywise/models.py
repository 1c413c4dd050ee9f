"""Wire models for schedule requests and responses.

Field names follow the JSON boundary (camelCase); Python attributes are
snake_case and either form is accepted on input.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .scheduler.core import Priority
from .scheduler.timeutils import WEEKDAY_NAMES, parse_clock, parse_iso_date, parse_iso_datetime

DEFAULT_WORKING_DAYS = ["monday", "tuesday", "wednesday", "thursday", "friday"]


class WireModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WorkingHours(WireModel):
    """Daily working window as ``HH:MM`` strings."""

    start: str = "09:00"
    end: str = "17:00"

    @field_validator("start", "end")
    @classmethod
    def validate_clock(cls, value: str) -> str:
        parse_clock(value)
        return value


class Preferences(WireModel):
    """User scheduling preferences."""

    working_hours: WorkingHours = Field(default_factory=WorkingHours)
    working_days: list[str] = Field(default_factory=lambda: list(DEFAULT_WORKING_DAYS))
    time_zone: str = "UTC"
    break_duration: int = Field(default=15, ge=0)
    max_tasks_per_day: int = Field(default=8, ge=0)

    @field_validator("working_days")
    @classmethod
    def validate_working_days(cls, value: list[str]) -> list[str]:
        normalized = [day.strip().lower() for day in value]
        unknown = [day for day in normalized if day not in WEEKDAY_NAMES]
        if unknown:
            raise ValueError(
                f"Unknown weekday(s): {', '.join(unknown)}. Valid: {', '.join(WEEKDAY_NAMES)}"
            )
        return normalized


class TaskInput(WireModel):
    """A task as submitted for scheduling."""

    id: str | None = None
    title: str
    description: str | None = None
    priority: Priority = Priority.MEDIUM
    estimated_duration: PositiveInt | None = None  # minutes
    deadline: str | None = None
    start_date: str | None = None
    dependencies: list[str] = Field(default_factory=list)

    @field_validator("deadline", "start_date")
    @classmethod
    def validate_date(cls, value: str | None) -> str | None:
        if value is not None:
            parse_iso_date(value)
        return value


class ExistingEvent(WireModel):
    """An already-booked calendar event."""

    title: str
    start_time: str
    end_time: str
    description: str | None = None
    is_all_day: bool = False

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_datetime(cls, value: str) -> str:
        parse_iso_datetime(value)
        return value

    @model_validator(mode="after")
    def validate_end_after_start(self) -> ExistingEvent:
        """Ensure the event does not end before it starts."""
        if parse_iso_datetime(self.end_time) < parse_iso_datetime(self.start_time):
            raise ValueError("endTime must not be before startTime")
        return self


class ScheduleRequest(WireModel):
    """Body of a schedule generation request."""

    tasks: list[TaskInput]
    preferences: Preferences | None = None
    start_date: str | None = None
    existing_events: list[ExistingEvent] = Field(default_factory=list)

    @field_validator("start_date")
    @classmethod
    def validate_start_date(cls, value: str | None) -> str | None:
        if value is not None:
            parse_iso_datetime(value)
        return value


class ScheduledTaskOut(WireModel):
    task_id: str
    title: str
    description: str | None = None
    start_time: str
    end_time: str
    priority: Priority
    reasoning: str


class UnscheduledTaskOut(WireModel):
    task_id: str
    title: str
    reason: str


class ScheduleSummaryOut(WireModel):
    total_tasks: int
    scheduled_tasks: int
    unscheduled_tasks: list[UnscheduledTaskOut]
    estimated_completion_date: str | None
    workload_distribution: dict[str, int]


class ScheduleResponse(WireModel):
    """Body of a schedule generation response."""

    schedule: list[ScheduledTaskOut]
    summary: ScheduleSummaryOut
    recommendations: list[str]

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON response shape.

        Absent task descriptions are omitted; a missing completion date stays null.
        """
        payload = self.model_dump(mode="json", by_alias=True)
        for item in payload["schedule"]:
            if item["description"] is None:
                del item["description"]
        return payload
