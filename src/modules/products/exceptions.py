"""Product domain exceptions.

Raised by the Service Layer when business rules are violated.  Each one
is a ``DomainError`` subclass, so the API exception handler can map it to
an HTTP response by its ``kind``.
"""

from __future__ import annotations

from modules.core.exceptions import (
    AlreadyExists,
    DomainValidationError,
    NotFound,
    WriteFailed,
)


class ProductAlreadyExists(AlreadyExists):
    """A live product with the same SKU already exists.

    Covers RN-PRO-001 (unique active SKU).
    """


class ProductNotFound(NotFound):
    """The requested product does not exist or has been soft-deleted."""


class ProductVersionMismatch(DomainValidationError):
    """The caller's version is stale, or a concurrent write won the race."""

    default_message = "Version mismatch! Please refresh and try again."


class InvalidSkuFilter(DomainValidationError):
    """The ``skus`` list filter is not a quoted JSON array of strings."""


class InvalidProductInput(DomainValidationError):
    pass


class ProductWriteFailed(WriteFailed):
    default_message = "Failed to write product. Please try again."
