import pytest

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def auth_client():
    """APIClient with a force-authenticated Django user."""
    client = APIClient()
    user = get_user_model().objects.create_user(
        username="catalog_user", password="testpass123"
    )
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def soft_delete():
    """Soft-delete a product through the repository's versioned write."""
    from modules.products.repositories.django_repository import (
        ProductDjangoRepository,
    )

    repo = ProductDjangoRepository()

    def _soft_delete(product):
        deleted = repo.update_by_id(
            str(product.id),
            {"destroy": True},
            expected_version=product.version,
            bump_version=False,
        )
        assert deleted is not None
        product.refresh_from_db()
        return product

    return _soft_delete
