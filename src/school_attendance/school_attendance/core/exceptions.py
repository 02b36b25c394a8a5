from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class ScheduleConflictError(DomainError):
    """Raised by the write path when the conflict check reports collisions."""

    def __init__(self, conflicts, message: str = "Schedule conflicts detected"):
        super().__init__(message)
        self.conflicts = list(conflicts)


class DuplicateRecordError(DomainError):
    """Raised when a storage-level uniqueness constraint rejects a write.

    This is the authoritative rejection when two requests race past the
    application-level pre-checks.
    """


class ResourceBusyError(DomainError):
    """Raised when a write lock could not be acquired in time."""
