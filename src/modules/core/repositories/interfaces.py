"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that all
domain-specific repository interfaces extend.  Service-layer code
depends on this abstraction, never on the ORM directly.

Contract shared by every implementation:

- Reads see live (non soft-deleted) records only.
- Reads signal absence with ``None`` (or an empty list), never by raising.
- ``update_by_id`` is a compare-and-swap: it only writes when the stored
  ``version`` still equals ``expected_version``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, List, Mapping, Optional, Sequence, TypeVar

from django.db.models import Q

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` represents the domain entity managed by the
    repository (e.g. ``Product``).
    """

    @abstractmethod
    def find_one(self, criteria: Q) -> Optional[T]:
        """Return the first live entity matching ``criteria``."""

    @abstractmethod
    def find_many(
        self,
        criteria: Q,
        *,
        skip: int = 0,
        limit: Optional[int] = None,
        sort: Sequence[str] = (),
    ) -> List[T]:
        """Return a page of live entities matching ``criteria``."""

    @abstractmethod
    def find_by_id(self, id: str) -> Optional[T]:
        """Retrieve a live entity by its primary key."""

    @abstractmethod
    def create(self, entity: T) -> T:
        """Insert a new entity and return its stored form."""

    @abstractmethod
    def update_by_id(
        self,
        id: str,
        patch: Mapping[str, Any],
        *,
        expected_version: int,
        bump_version: bool = True,
    ) -> Optional[T]:
        """Apply ``patch`` if the stored version is still ``expected_version``.

        Returns the entity as stored after the write, or ``None`` when no
        live row with that id and version exists.
        """
