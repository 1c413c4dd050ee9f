"""Configuration classes for the scheduling system."""

from pydantic import BaseModel, Field


class SchedulingConfig(BaseModel):
    """Algorithm knobs that are not part of a user's preferences."""

    # Defaults for tasks without explicit values
    default_duration_minutes: int = Field(default=60, gt=0)
    default_window_days: int = Field(default=30, gt=0)  # Horizon for tasks without deadline

    # Hard cap on day-by-day roll-forward when looking for a working day
    max_rollforward_days: int = Field(default=7, ge=1)

    # Free-window reporting
    min_free_window_minutes: int = Field(default=5, ge=0)

    # Response cache lifetime for the request-handling layer
    cache_ttl_seconds: float = Field(default=300.0, ge=0)
