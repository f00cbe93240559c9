"""Custom application exceptions."""

from typing import Any


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

    def payload(self) -> dict[str, Any]:
        """Extra fields merged into the JSON error body."""
        return {}


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class ValidationException(AppException):
    """Malformed or missing input.

    Every violated rule is collected in ``details`` so the caller can fix all
    of them in one round trip.
    """

    def __init__(self, message: str = "Validation failed", details: list[str] | None = None):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)
        self.details = details or []

    def payload(self) -> dict[str, Any]:
        """Include the violated rules."""
        return {"details": self.details} if self.details else {}


class ConflictException(AppException):
    """Duplicate hospital number or overlapping appointment slot."""

    def __init__(
        self,
        message: str = "Conflict",
        conflicting_appointments: list[dict[str, Any]] | None = None,
    ):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)
        self.conflicting_appointments = conflicting_appointments

    def payload(self) -> dict[str, Any]:
        """Include the conflicting slots, when the conflict is about time."""
        if self.conflicting_appointments is None:
            return {}
        return {"conflictingAppointments": self.conflicting_appointments}


class DependencyException(AppException):
    """Record is still referenced and cannot be removed."""

    def __init__(self, message: str, appointment_count: int):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)
        self.appointment_count = appointment_count

    def payload(self) -> dict[str, Any]:
        """Include the number of referencing appointments."""
        return {"appointmentCount": self.appointment_count}


class StoreException(AppException):
    """Document store unavailable or rejected the call."""

    def __init__(self, message: str = "Firestore error", cause: Exception | None = None):
        """Initialize with 500 status code."""
        super().__init__(message, status_code=500)
        self.cause = cause
