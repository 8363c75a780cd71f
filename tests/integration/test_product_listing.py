"""Integration tests for the product list: filtering, ordering, pagination."""

from __future__ import annotations

import pytest
from freezegun import freeze_time

from modules.products.models import Product

pytestmark = pytest.mark.integration

BASE_URL = "/api/v1/products/"


def _make_product(sku: str, name: str = "Widget", created: str | None = None) -> Product:
    if created is None:
        return Product.objects.create(sku=sku, product_name=name)
    with freeze_time(created):
        return Product.objects.create(sku=sku, product_name=name)


def _skus(response) -> list[str]:
    return [item["sku"] for item in response.data["results"]]


@pytest.fixture()
def product_batch():
    """25 products created one minute apart, oldest first."""
    return [
        _make_product(f"SKU-{idx:03d}", created=f"2024-02-01 10:{idx:02d}:00")
        for idx in range(1, 26)
    ]


# ===========================================================================
# Ordering / pagination
# ===========================================================================


class TestPagination:
    def test_default_page(self, auth_client, product_batch):
        response = auth_client.get(BASE_URL)
        assert response.status_code == 200
        assert response.data["page"] == 1
        assert response.data["limit"] == 10
        assert len(response.data["results"]) == 10

    def test_newest_first(self, auth_client, product_batch):
        response = auth_client.get(BASE_URL)
        assert _skus(response)[:3] == ["SKU-025", "SKU-024", "SKU-023"]

    def test_second_page_skips_first(self, auth_client, product_batch):
        response = auth_client.get(BASE_URL, {"page": 2, "limit": 10})
        assert _skus(response) == [f"SKU-{idx:03d}" for idx in range(15, 5, -1)]

    def test_last_partial_page(self, auth_client, product_batch):
        response = auth_client.get(BASE_URL, {"page": 3, "limit": 10})
        assert len(response.data["results"]) == 5

    def test_page_past_end_is_empty(self, auth_client, product_batch):
        response = auth_client.get(BASE_URL, {"page": 9})
        assert response.status_code == 200
        assert response.data["results"] == []

    def test_page_zero_returns_400(self, auth_client):
        response = auth_client.get(BASE_URL, {"page": 0})
        assert response.status_code == 400

    def test_empty_catalog(self, auth_client):
        response = auth_client.get(BASE_URL)
        assert response.status_code == 200
        assert response.data["results"] == []

    def test_deleted_products_excluded(self, auth_client, soft_delete):
        _make_product("KEEP")
        soft_delete(_make_product("DROP"))
        response = auth_client.get(BASE_URL)
        assert _skus(response) == ["KEEP"]


# ===========================================================================
# skus filter
# ===========================================================================


class TestSkusFilter:
    def test_restricts_to_listed_skus(self, auth_client, product_batch):
        response = auth_client.get(BASE_URL, {"skus": "['SKU-001','SKU-002']"})
        assert sorted(_skus(response)) == ["SKU-001", "SKU-002"]

    def test_applies_with_other_filters(self, auth_client):
        _make_product("X", name="Running Shoe")
        _make_product("Y", name="Running Shoe")
        _make_product("Z", name="Running Shoe")
        response = auth_client.get(
            BASE_URL, {"skus": "['X','Y']", "productName": "shoe"}
        )
        assert sorted(_skus(response)) == ["X", "Y"]

    def test_empty_list_does_not_filter(self, auth_client, product_batch):
        response = auth_client.get(BASE_URL, {"skus": "[]", "limit": 100})
        assert len(response.data["results"]) == 25

    def test_malformed_skus_returns_400(self, auth_client):
        response = auth_client.get(BASE_URL, {"skus": "['SKU-001'"})
        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "validation"


# ===========================================================================
# productName filter
# ===========================================================================


class TestProductNameFilter:
    @pytest.fixture(autouse=True)
    def _names(self):
        _make_product("S1", name="Shoe")
        _make_product("S2", name="Running Shoe")
        _make_product("S3", name="shoelace")
        _make_product("H1", name="Hat")

    def test_exact_match(self, auth_client):
        response = auth_client.get(
            BASE_URL, {"productName": "Shoe", "searchTrue": "true"}
        )
        assert _skus(response) == ["S1"]

    def test_substring_case_insensitive(self, auth_client):
        response = auth_client.get(
            BASE_URL, {"productName": "shoe", "searchTrue": "false"}
        )
        assert sorted(_skus(response)) == ["S1", "S2", "S3"]

    def test_search_true_absent_means_substring(self, auth_client):
        response = auth_client.get(BASE_URL, {"productName": "SHOE"})
        assert sorted(_skus(response)) == ["S1", "S2", "S3"]

    def test_regex_characters_are_literal(self, auth_client):
        response = auth_client.get(BASE_URL, {"productName": "Sh.e"})
        assert response.data["results"] == []


# ===========================================================================
# Date range filter
# ===========================================================================


class TestDateRangeFilter:
    @pytest.fixture(autouse=True)
    def _days(self):
        _make_product("DEC31-LATE", created="2023-12-31 23:59:59")
        _make_product("JAN01-EARLY", created="2024-01-01 00:00:00")
        _make_product("JAN01-LATE", created="2024-01-01 23:59:59.999000")
        _make_product("JAN02-EARLY", created="2024-01-02 00:00:00")

    def test_single_day(self, auth_client):
        response = auth_client.get(
            BASE_URL, {"fromDate": "2024-01-01", "toDate": "2024-01-01"}
        )
        assert sorted(_skus(response)) == ["JAN01-EARLY", "JAN01-LATE"]

    def test_from_date_only(self, auth_client):
        response = auth_client.get(BASE_URL, {"fromDate": "2024-01-01"})
        assert sorted(_skus(response)) == ["JAN01-EARLY", "JAN01-LATE", "JAN02-EARLY"]

    def test_to_date_only(self, auth_client):
        response = auth_client.get(BASE_URL, {"toDate": "2024-01-01"})
        assert sorted(_skus(response)) == ["DEC31-LATE", "JAN01-EARLY", "JAN01-LATE"]

    def test_invalid_date_returns_400(self, auth_client):
        response = auth_client.get(BASE_URL, {"fromDate": "01/01/2024"})
        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "fromDate"


class TestListingInputBounds:
    def test_page_beyond_offset_range_returns_400(self, auth_client):
        response = auth_client.get(BASE_URL, {"page": str(10**20)})
        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "page"

    def test_deeply_nested_skus_returns_400(self, auth_client):
        response = auth_client.get(BASE_URL, {"skus": "[" * 100_000})
        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "validation"

    def test_skus_members_are_trimmed(self, auth_client):
        _make_product("A1")
        response = auth_client.get(BASE_URL, {"skus": "[' A1 ']"})
        assert _skus(response) == ["A1"]
