"""Domain exceptions shared by services and the HTTP layer."""

from __future__ import annotations

from typing import Any


class BizOpsError(Exception):
    """Base class for all domain errors."""

    code = "ERROR"


class NotFoundError(BizOpsError):
    """Raised when a tenant-scoped record does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class ValidationError(BizOpsError):
    """Raised when input fails a business rule before any write."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)


class EntryLockedError(BizOpsError):
    """Raised when an approved time entry would be edited or deleted."""

    code = "ENTRY_LOCKED"

    def __init__(self, entry_id: Any, action: str):
        self.entry_id = entry_id
        self.action = action
        super().__init__(f"Cannot {action} approved time entry")


class EmployeeInactiveError(BizOpsError):
    """Raised when time is recorded for an inactive employee."""

    code = "EMPLOYEE_INACTIVE"

    def __init__(self, employee_id: Any):
        self.employee_id = employee_id
        super().__init__("Employee is inactive")


class ForbiddenError(BizOpsError):
    """Raised when the caller may not act on a record."""

    code = "FORBIDDEN"

    def __init__(self, message: str = "Not allowed"):
        super().__init__(message)


class InvalidTransitionError(BizOpsError):
    """Raised when an invalid state transition is attempted."""

    code = "INVALID_TRANSITION"

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ContradictoryStatusError(BizOpsError):
    """Raised when an explicit status disagrees with the status flags."""

    code = "CONTRADICTORY_STATUS"

    def __init__(self, flags: list[str]):
        self.flags = flags
        super().__init__(f"Contradictory status flags: {', '.join(flags)}")
