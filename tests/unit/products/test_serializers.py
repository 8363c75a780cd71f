"""Unit tests for Product DRF serializers.

Covers:
- Field presence and camelCase naming.
- Serialization of a Product instance.
- The list envelope.
"""

from __future__ import annotations

import pytest

from modules.products.models import Product
from modules.products.serializers import ProductListSerializer, ProductSerializer

pytestmark = pytest.mark.unit


class TestSerializerFields:
    def test_expected_fields(self):
        serializer = ProductSerializer()
        expected = {"id", "sku", "productName", "version", "createdAt", "updatedAt"}
        assert set(serializer.fields.keys()) == expected

    def test_read_only_fields(self):
        serializer = ProductSerializer()
        for field_name in ("id", "version", "createdAt", "updatedAt"):
            assert serializer.fields[field_name].read_only is True

    def test_destroy_flag_is_not_exposed(self):
        assert "destroy" not in ProductSerializer().fields


class TestSerialization:
    def test_serializes_product(self):
        product = Product.objects.create(sku="SKU-1", product_name="Widget")
        data = ProductSerializer(product).data
        assert data["id"] == str(product.id)
        assert data["sku"] == "SKU-1"
        assert data["productName"] == "Widget"
        assert data["version"] == 1
        assert data["createdAt"]
        assert data["updatedAt"]

    def test_list_envelope(self):
        product = Product.objects.create(sku="SKU-2", product_name="Gadget")
        data = ProductListSerializer(
            {"page": 1, "limit": 10, "results": [product]}
        ).data
        assert data["page"] == 1
        assert data["limit"] == 10
        assert [item["sku"] for item in data["results"]] == ["SKU-2"]
