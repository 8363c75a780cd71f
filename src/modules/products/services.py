"""Product service layer (Use Cases).

Orchestrates business logic for the Product aggregate, delegating
persistence to the injected ``IProductRepository``.

Business rules enforced here:
- RN-PRO-001: SKU must be unique among live products.
- RN-PRO-002: Updates and deletes carry the version the caller last read;
  a stale version is rejected and every successful update bumps it by one.
- RN-PRO-003: Soft delete is terminal.

The version check is done twice: once against the row just read, which
answers stale callers without writing, and once inside the repository's
conditional write, which catches a concurrent writer that slipped in
between the read and the write.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Tuple

import structlog
from django.db import transaction

from modules.products.exceptions import (
    InvalidProductInput,
    ProductAlreadyExists,
    ProductNotFound,
    ProductVersionMismatch,
)
from modules.products.filters import PRODUCT_LIST_ORDERING, ProductFilter
from modules.products.models import Active, Product

if TYPE_CHECKING:
    from modules.products.dtos import (
        CreateProductDTO,
        ProductListQuery,
        UpdateProductDTO,
    )
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: CreateProductDTO) -> Product:
        """Create a new product after enforcing uniqueness rules.

        Raises:
            ProductAlreadyExists: if a live product holds the SKU (RN-PRO-001).
        """
        log = logger.bind(sku=dto.sku)

        if self._repo.find_by_sku(dto.sku):
            log.warning("product.duplicate_sku")
            raise ProductAlreadyExists(f"SKU '{dto.sku}' already registered.")

        product = self._repo.create(
            Product(sku=dto.sku, product_name=dto.product_name)
        )
        log.info("product.created", product_id=str(product.id))
        return product

    @transaction.atomic
    def update_product(self, id: str, dto: UpdateProductDTO) -> Product:
        """Apply the supplied fields if ``dto.version`` is still current.

        Raises:
            ProductNotFound: if no live product has this id.
            ProductVersionMismatch: if the version is stale or a concurrent
                write landed first.
            ProductAlreadyExists: if the new SKU belongs to another product.
        """
        log = logger.bind(product_id=str(id))
        product, state = self._get_live(id)
        self._check_version(state, dto.version, log)

        changes = dto.changes()
        new_sku = changes.get("sku")
        if new_sku is not None and new_sku != product.sku:
            if self._repo.find_by_sku(new_sku):
                log.warning("product.duplicate_sku", sku=new_sku)
                raise ProductAlreadyExists(f"SKU '{new_sku}' already registered.")

        updated = self._repo.update_by_id(
            id, changes, expected_version=state.version
        )
        if updated is None:
            log.warning("product.version_conflict", expected_version=state.version)
            raise ProductVersionMismatch()

        log.info("product.updated", version=updated.version, fields=sorted(changes))
        return updated

    @transaction.atomic
    def delete_product(self, id: str, version: int) -> bool:
        """Soft-delete a product (RN-PRO-003); the version is left unchanged.

        Raises:
            ProductNotFound: if no live product has this id.
            ProductVersionMismatch: if the version is stale or a concurrent
                write landed first.
        """
        log = logger.bind(product_id=str(id))
        _, state = self._get_live(id)
        self._check_version(state, version, log)

        deleted = self._repo.update_by_id(
            id,
            {"destroy": True},
            expected_version=state.version,
            bump_version=False,
        )
        if deleted is None:
            log.warning("product.version_conflict", expected_version=state.version)
            raise ProductVersionMismatch()

        log.info("product.soft_deleted")
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_product_detail(self, sku: str) -> Product:
        """Retrieve the live product holding ``sku``.

        Raises:
            InvalidProductInput: if ``sku`` is blank.
            ProductNotFound: if no live product holds the SKU.
        """
        sku = (sku or "").strip()
        if not sku:
            raise InvalidProductInput("SKU must not be empty.")

        product = self._repo.find_by_sku(sku)
        if product is None or not isinstance(product.lifecycle, Active):
            logger.info("product.not_found", sku=sku)
            raise ProductNotFound(f"Product with SKU '{sku}' not found.")
        logger.info("product.retrieved", product_id=str(product.id))
        return product

    def list_products(self, query: ProductListQuery) -> List[Product]:
        """Return one page of live products, newest first.

        Raises:
            InvalidSkuFilter: if ``query.skus`` cannot be decoded.
        """
        product_filter = ProductFilter.from_query(query)
        products = self._repo.find_many(
            product_filter.to_q(),
            skip=query.offset,
            limit=query.limit,
            sort=PRODUCT_LIST_ORDERING,
        )
        logger.info(
            "product.listed",
            page=query.page,
            limit=query.limit,
            clauses=len(product_filter.clauses),
            count=len(products),
        )
        return products

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_live(self, id: str) -> Tuple[Product, Active]:
        """Load ``id`` and return it with its ``Active`` lifecycle state."""
        product = self._repo.find_by_id(id)
        state = product.lifecycle if product is not None else None
        if not isinstance(state, Active):
            logger.info("product.not_found", product_id=str(id))
            raise ProductNotFound(f"Product {id} not found.")
        return product, state

    @staticmethod
    def _check_version(state: Active, version: int, log) -> None:
        if version != state.version:
            log.warning(
                "product.version_mismatch",
                expected_version=state.version,
                received_version=version,
            )
            raise ProductVersionMismatch()
