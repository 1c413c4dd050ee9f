"""High-level scheduling service at the JSON request boundary."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .cache import ResponseCache, SchedulerMetrics
from .clock import SystemClock
from .exceptions import ValidationError
from .logger import get_logger
from .models import (
    ExistingEvent,
    Preferences,
    ScheduledTaskOut,
    ScheduleRequest,
    ScheduleResponse,
    ScheduleSummaryOut,
    TaskInput,
    UnscheduledTaskOut,
)
from .scheduler import (
    Clock,
    FirstFitScheduler,
    SchedulingConfig,
    SchedulingResult,
    TaskNormalizer,
    WorkPolicy,
    build_policy,
    normalize_events,
    parse_reference,
)
from .scheduler.timeutils import format_iso_datetime

logger = get_logger()

UNSCHEDULED_RECOMMENDATION = (
    "Consider extending working hours or deadline flexibility for unscheduled tasks"
)


def schedule(
    tasks: Sequence[TaskInput | dict[str, Any]],
    preferences: Preferences | dict[str, Any] | None,
    reference_date: datetime | str,
    existing_events: Sequence[ExistingEvent | dict[str, Any]] = (),
    config: SchedulingConfig | None = None,
) -> ScheduleResponse:
    """Schedule tasks around existing events.

    Pure and deterministic for a fixed ``reference_date``; the caller's event
    list is never modified.

    Raises:
        ValidationError: If any input is malformed (nothing is scheduled)
    """
    try:
        request = ScheduleRequest.model_validate(
            {
                "tasks": list(tasks),
                "preferences": preferences,
                "existingEvents": list(existing_events),
            }
        )
    except PydanticValidationError as e:
        raise validation_error_from_pydantic(e) from e
    return run_request(request, parse_reference(reference_date), config)


def run_request(
    request: ScheduleRequest,
    reference: datetime,
    config: SchedulingConfig | None = None,
    default_preferences: Preferences | None = None,
) -> ScheduleResponse:
    """Normalize a validated request, run placement and build the response.

    Requests without preferences use ``default_preferences``, else the built-in defaults.
    """
    config = config or SchedulingConfig()
    preferences = request.preferences or default_preferences or Preferences()

    tasks = TaskNormalizer(config).normalize(request.tasks)
    existing = normalize_events(request.existing_events)
    policy = build_policy(preferences)

    result = FirstFitScheduler(tasks, policy, reference, existing, config=config).schedule()
    return build_response(result, policy)


def build_response(result: SchedulingResult, policy: WorkPolicy) -> ScheduleResponse:
    """Convert a SchedulingResult to the wire response."""
    summary = result.summary
    completion = summary.estimated_completion_date
    return ScheduleResponse(
        schedule=[
            ScheduledTaskOut(
                task_id=placement.task_id,
                title=placement.title,
                description=placement.description,
                start_time=format_iso_datetime(placement.start),
                end_time=format_iso_datetime(placement.end),
                priority=placement.priority,
                reasoning=placement.reasoning,
            )
            for placement in result.scheduled
        ],
        summary=ScheduleSummaryOut(
            total_tasks=summary.total_tasks,
            scheduled_tasks=summary.scheduled_count,
            unscheduled_tasks=[
                UnscheduledTaskOut(task_id=item.task_id, title=item.title, reason=item.reason)
                for item in result.unscheduled
            ],
            estimated_completion_date=completion.isoformat() if completion else None,
            workload_distribution=summary.workload_distribution,
        ),
        recommendations=recommendations(result, policy),
    )


def recommendations(result: SchedulingResult, policy: WorkPolicy) -> list[str]:
    """Suggestions derived from the outcome.

    ``maxTasksPerDay`` is advisory: days over it are reported, never capped.
    """
    notes: list[str] = []
    if result.unscheduled:
        notes.append(UNSCHEDULED_RECOMMENDATION)

    limit = policy.max_tasks_per_day
    if limit:
        for day, count in result.summary.workload_distribution.items():
            if count > limit:
                notes.append(
                    f"{day} has {count} tasks scheduled, above the preferred maximum of "
                    f"{limit} per day"
                )
    return notes


def validation_error_from_pydantic(error: PydanticValidationError) -> ValidationError:
    """Flatten pydantic errors into a ValidationError."""
    details = [
        {"loc": list(item["loc"]), "msg": item["msg"]}
        for item in error.errors(include_url=False)
    ]
    return ValidationError(f"{error.error_count()} invalid field(s) in request", details)


class SchedulingService:
    """Handles JSON schedule requests.

    This service coordinates:
    - Request validation (pydantic wire models)
    - Reference-time resolution from the injected clock
    - The first-fit scheduler
    - A response cache (built from the configured TTL unless one is passed) and
      metrics counters owned by the caller
    """

    def __init__(
        self,
        config: SchedulingConfig | None = None,
        clock: Clock | None = None,
        cache: ResponseCache | None = None,
        metrics: SchedulerMetrics | None = None,
        default_preferences: Preferences | None = None,
    ):
        """Initialize the service.

        Args:
            config: Optional algorithm configuration
            clock: Source of "now" when a request has no startDate (defaults to UTC wall clock)
            cache: Optional response cache; when omitted, one is created from
                ``config.cache_ttl_seconds`` (a TTL of zero disables caching)
            metrics: Optional metrics counters, updated in place
            default_preferences: Preferences for requests that carry none
        """
        self.config = config or SchedulingConfig()
        self.clock: Clock = clock or SystemClock()
        if cache is None and self.config.cache_ttl_seconds > 0:
            cache = ResponseCache(self.config.cache_ttl_seconds, self.clock)
        self.cache = cache
        self.metrics = metrics if metrics is not None else SchedulerMetrics()
        self.default_preferences = default_preferences

    def handle(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Validate a request body and return the response body.

        Raises:
            ValidationError: If the request is malformed
        """
        self.metrics.requests += 1
        try:
            request = ScheduleRequest.model_validate(payload)
            reference = (
                parse_reference(request.start_date) if request.start_date else self.clock.now()
            )
        except PydanticValidationError as e:
            self.metrics.validation_errors += 1
            raise validation_error_from_pydantic(e) from e
        except ValidationError:
            self.metrics.validation_errors += 1
            raise

        key = None
        if self.cache is not None:
            key = ResponseCache.make_key(request.model_dump(mode="json", by_alias=True), reference)
            cached = self.cache.get(key)
            if cached is not None:
                self.metrics.cache_hits += 1
                logger.debug(f"cache hit for request {key[:12]}")
                return cached
            self.metrics.cache_misses += 1

        try:
            response = run_request(
                request, reference, self.config, self.default_preferences
            )
        except ValidationError:
            self.metrics.validation_errors += 1
            raise

        self.metrics.tasks_scheduled += response.summary.scheduled_tasks
        self.metrics.tasks_unscheduled += len(response.summary.unscheduled_tasks)

        body = response.to_payload()
        if self.cache is not None and key is not None:
            self.cache.put(key, body)
        return body
