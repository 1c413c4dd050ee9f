"""Custom exceptions for Daywise."""

from typing import Any


class DaywiseError(Exception):
    """Base exception for all Daywise errors."""

    pass


class ValidationError(DaywiseError):
    """Raised when a scheduling request is malformed.

    Carries one entry per offending field so callers can report every problem
    at once instead of failing on the first.
    """

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: list[dict[str, Any]] = details or []

    def to_payload(self) -> dict[str, Any]:
        """Structured error body for the request boundary."""
        return {
            "error": "Invalid schedule request",
            "message": self.message,
            "details": self.details,
        }


class ConfigError(DaywiseError, ValueError):
    """Raised when a configuration file cannot be used."""

    pass
