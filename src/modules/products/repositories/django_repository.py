"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern: look-ups return ``None``
instead of raising; the Service Layer decides how to translate a missing
entity into a domain error.

Versioned writes are a single conditional ``UPDATE`` filtered on id,
version and ``destroy = false``, so two writers holding the same version
can never both succeed.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

import structlog

from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone

from modules.products.exceptions import ProductAlreadyExists, ProductWriteFailed
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    @staticmethod
    def _alive():
        return Product.objects.alive()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_one(self, criteria: Q) -> Optional[Product]:
        return self._alive().filter(criteria).first()

    def find_many(
        self,
        criteria: Q,
        *,
        skip: int = 0,
        limit: Optional[int] = None,
        sort: Sequence[str] = (),
    ) -> List[Product]:
        """Return one page of live products.

        Examples of valid criteria::

            Q(sku__in=["A1", "A2"])
            Q(product_name__icontains="shoe") & Q(created_at__gte=start)
        """
        queryset = self._alive().filter(criteria)
        if sort:
            queryset = queryset.order_by(*sort)
        end = skip + limit if limit is not None else None
        return list(queryset[skip:end])

    def find_by_id(self, id: str) -> Optional[Product]:
        """Retrieve a live product by primary key.

        Returns ``None`` for non-existent, soft-deleted or malformed IDs.
        """
        try:
            return self._alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def find_by_sku(self, sku: str) -> Optional[Product]:
        return self.find_one(Q(sku=sku.strip()))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, entity: Product) -> Product:
        """Insert a new product.

        Raises:
            ProductAlreadyExists: a concurrent insert took the SKU first.
            ProductWriteFailed: any other database failure.
        """
        try:
            with transaction.atomic():
                entity.save(force_insert=True)
        except IntegrityError as exc:
            logger.warning("product.insert_conflict", sku=entity.sku)
            raise ProductAlreadyExists(
                f"SKU '{entity.sku}' already registered."
            ) from exc
        except DatabaseError as exc:
            raise ProductWriteFailed() from exc
        logger.info("product.saved", product_id=str(entity.id), sku=entity.sku)
        return entity

    @transaction.atomic
    def update_by_id(
        self,
        id: str,
        patch: Mapping[str, Any],
        *,
        expected_version: int,
        bump_version: bool = True,
    ) -> Optional[Product]:
        """Compare-and-swap write of ``patch``.

        ``version`` is incremented in the same statement when
        ``bump_version`` is set.  Returns ``None`` when no live row with
        ``id`` and ``expected_version`` exists.

        Raises:
            ProductAlreadyExists: the patch moves onto a live SKU.
            ProductWriteFailed: any other database failure.
        """
        values: Dict[str, Any] = dict(patch)
        values["updated_at"] = timezone.now()
        if bump_version:
            values["version"] = F("version") + 1

        try:
            with transaction.atomic():
                matched = (
                    self._alive()
                    .filter(id=id, version=expected_version)
                    .update(**values)
                )
        except (ValueError, ValidationError):
            return None
        except IntegrityError as exc:
            raise ProductAlreadyExists(
                f"SKU '{patch.get('sku')}' already registered."
            ) from exc
        except DatabaseError as exc:
            raise ProductWriteFailed() from exc

        if not matched:
            logger.info(
                "product.cas_miss",
                product_id=str(id),
                expected_version=expected_version,
            )
            return None

        return Product.objects.filter(id=id).first()
