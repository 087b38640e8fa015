"""
Domain errors for the conference tracker.

These are raised by the store, validation and persistence layers and mapped
to HTTP status codes by the API layer.
"""

from typing import Optional


class ConferenceTrackerError(Exception):
    """Base exception for all conference tracker errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(ConferenceTrackerError):
    """Raised when edit/get targets an identifier the store does not hold."""

    def __init__(self, conference_id: str):
        super().__init__(
            message="Conference not found",
            details={"id": conference_id},
        )


class ValidationError(ConferenceTrackerError):
    """Raised when a candidate record breaks a required-field or date-order rule."""

    def __init__(self, reason: str, field: Optional[str] = None, index: Optional[int] = None):
        details = {"field": field}
        if index is not None:
            details["index"] = index
        super().__init__(message=reason, details=details)

    @property
    def field(self) -> Optional[str]:
        return self.details.get("field")


class DocumentError(ConferenceTrackerError):
    """Raised when a JSON document cannot be parsed or lacks a conferences array."""


class PersistenceError(ConferenceTrackerError):
    """Raised when a load tier (remote snapshot or local storage) fails."""

    def __init__(self, tier: str, reason: Optional[str] = None):
        message = f"Load tier '{tier}' failed"
        if reason:
            message += f": {reason}"
        super().__init__(message=message, details={"tier": tier, "reason": reason})
