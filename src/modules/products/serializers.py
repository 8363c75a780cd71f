"""Product DRF serializers for API output.

The serializer operates at the Interface layer (API views) and renames
model fields to the camelCase names the API exposes.  Input is parsed
into the Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    """Read serializer for the Product resource."""

    productName = serializers.CharField(source="product_name")
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "productName",
            "version",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = ["id", "version"]


class ProductListSerializer(serializers.Serializer):
    """Envelope for one page of the product list."""

    page = serializers.IntegerField()
    limit = serializers.IntegerField()
    results = ProductSerializer(many=True)
