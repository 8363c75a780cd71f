"""Optimistic concurrency integration tests.

Proves that the version guard holds even when two writers read the same
version: the service's pre-check passes for both, but the conditional
write only lets the first one through.

The interleaving is reproduced deterministically by handing the second
writer a repository whose ``find_by_id`` returns the snapshot taken
before the first write landed.
"""

from __future__ import annotations

import pytest

from modules.products.dtos import UpdateProductDTO
from modules.products.exceptions import ProductNotFound, ProductVersionMismatch
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import ProductService

pytestmark = pytest.mark.integration


class SnapshotRepository(ProductDjangoRepository):
    """Repository that serves a stale read, as a slow concurrent caller would see."""

    def __init__(self, snapshot: Product) -> None:
        self._snapshot = snapshot

    def find_by_id(self, id: str):
        return self._snapshot


@pytest.fixture()
def product():
    return Product.objects.create(sku="OCC-1", product_name="Original")


@pytest.fixture()
def service():
    return ProductService(repository=ProductDjangoRepository())


class TestLostUpdate:
    def test_second_update_with_same_version_is_rejected(self, product, service):
        stale_snapshot = Product.objects.get(id=product.id)

        service.update_product(
            str(product.id), UpdateProductDTO(version=1, product_name="First")
        )

        racer = ProductService(repository=SnapshotRepository(stale_snapshot))
        with pytest.raises(ProductVersionMismatch):
            racer.update_product(
                str(product.id), UpdateProductDTO(version=1, product_name="Second")
            )

        product.refresh_from_db()
        assert product.product_name == "First"
        assert product.version == 2

    def test_delete_racing_an_update_is_rejected(self, product, service):
        stale_snapshot = Product.objects.get(id=product.id)

        service.update_product(
            str(product.id), UpdateProductDTO(version=1, product_name="First")
        )

        racer = ProductService(repository=SnapshotRepository(stale_snapshot))
        with pytest.raises(ProductVersionMismatch):
            racer.delete_product(str(product.id), 1)

        product.refresh_from_db()
        assert product.destroy is False

    def test_update_racing_a_delete_is_rejected(self, product, service):
        stale_snapshot = Product.objects.get(id=product.id)

        service.delete_product(str(product.id), 1)

        racer = ProductService(repository=SnapshotRepository(stale_snapshot))
        with pytest.raises(ProductVersionMismatch):
            racer.update_product(
                str(product.id), UpdateProductDTO(version=1, product_name="Zombie")
            )

        product.refresh_from_db()
        assert product.product_name == "Original"


class TestVersionSequence:
    def test_each_update_bumps_version_by_one(self, product, service):
        for expected in range(1, 6):
            updated = service.update_product(
                str(product.id),
                UpdateProductDTO(version=expected, product_name=f"Rev {expected}"),
            )
            assert updated.version == expected + 1

    def test_delete_keeps_version_then_becomes_invisible(self, product, service):
        service.update_product(
            str(product.id), UpdateProductDTO(version=1, product_name="Rev")
        )

        assert service.delete_product(str(product.id), 2) is True

        product.refresh_from_db()
        assert product.version == 2
        assert product.destroy is True
        with pytest.raises(ProductNotFound):
            service.update_product(str(product.id), UpdateProductDTO(version=2))
        with pytest.raises(ProductNotFound):
            service.delete_product(str(product.id), 2)
        with pytest.raises(ProductNotFound):
            service.get_product_detail("OCC-1")
