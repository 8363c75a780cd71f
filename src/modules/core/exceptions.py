"""Domain error taxonomy shared by every module.

Each error carries a ``kind`` that callers branch on; the message is for
humans only.  The API exception handler maps ``kind`` to an HTTP status.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    VALIDATION = "validation"
    WRITE_FAILED = "write_failed"


class DomainError(Exception):
    """Base class for business-rule failures raised by the Service Layer."""

    kind: ErrorKind = ErrorKind.WRITE_FAILED
    default_message = "The operation could not be completed."

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(DomainError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Resource not found."


class AlreadyExists(DomainError):
    kind = ErrorKind.ALREADY_EXISTS
    default_message = "Resource already exists."


class DomainValidationError(DomainError):
    """Caller-correctable input or state problem."""

    kind = ErrorKind.VALIDATION
    default_message = "Invalid request."


class WriteFailed(DomainError):
    """The store reported an unexpected outcome for a write."""

    kind = ErrorKind.WRITE_FAILED
