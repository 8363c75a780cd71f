"""Product model with active-SKU uniqueness and optimistic versioning.

Business rules implemented:
- RN-PRO-001: SKU must be unique among live (non soft-deleted) products.
- RN-PRO-002: ``version`` starts at 1 and is bumped on every update.
- RN-PRO-003: Soft delete via ``destroy`` (inherited from SoftDeleteModel);
  a deleted product never comes back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import structlog

from django.db import models

from modules.core.models import SoftDeleteModel

logger = structlog.get_logger(__name__)

INITIAL_VERSION = 1


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Active:
    version: int


@dataclass(frozen=True)
class Deleted:
    pass


ProductLifecycle = Union[Active, Deleted]


class Product(SoftDeleteModel):
    """Product aggregate root.

    ``sku`` is trimmed on save but its case is preserved.  The partial
    unique constraint lets a SKU be reused once its previous owner has
    been soft-deleted.
    """

    sku = models.CharField(max_length=64)
    product_name = models.CharField(max_length=255)
    version = models.PositiveIntegerField(default=INITIAL_VERSION)

    class Meta:
        db_table = "products"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(
                fields=["destroy", "created_at"],
                name="products_alive_created_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["sku"],
                condition=models.Q(destroy=False),
                name="products_active_sku_uniq",
            ),
            models.CheckConstraint(
                condition=models.Q(version__gte=INITIAL_VERSION),
                name="products_version_positive",
            ),
        ]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def lifecycle(self) -> ProductLifecycle:
        if self.destroy:
            return Deleted()
        return Active(version=self.version)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        if self.sku:
            self.sku = self.sku.strip()
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "product_created",
                product_id=str(self.id),
                sku=self.sku,
                version=self.version,
            )

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.sku} - {self.product_name} (v{self.version})"
