from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    http_status = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when an employee, office or attendance record does not exist."""

    http_status = 404


class ConflictError(DomainError):
    """Raised on double punch-in/punch-out or a duplicate day record."""


class PolicyViolation(DomainError):
    """Raised when a punch breaks attendance policy (geofence, holiday, week off).

    ``debug_info`` carries location details and is only exposed to clients
    when the application runs with geo debugging enabled.
    """

    def __init__(self, message: str, *, debug_info: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.debug_info = debug_info


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    http_status = 403


class PersistenceError(DomainError):
    """Raised when the attendance store fails unexpectedly."""

    http_status = 500
