"""Product API views.

Exposes the ``ProductService`` via HTTP using a DRF ViewSet.
Domain exceptions and DTO validation errors propagate to
``modules.core.exception_handler``, which turns them into the standard
error envelope; the view never swallows exceptions.
"""

from __future__ import annotations

from typing import Any, Mapping

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import ParseError
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.products.dtos import (
    CreateProductDTO,
    DeleteProductDTO,
    ProductListQuery,
    UpdateProductDTO,
)
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductListSerializer, ProductSerializer
from modules.products.services import ProductService

LIST_PARAMETERS = [
    OpenApiParameter("skus", str, description="Quoted list, e.g. ['A1','A2']"),
    OpenApiParameter("productName", str),
    OpenApiParameter("searchTrue", bool, description="Exact name match when true"),
    OpenApiParameter("page", int),
    OpenApiParameter("limit", int),
    OpenApiParameter("fromDate", str, description="YYYY-MM-DD, inclusive"),
    OpenApiParameter("toDate", str, description="YYYY-MM-DD, inclusive"),
]


def _body(request: Request) -> Mapping[str, Any]:
    """Return the request body, which must decode to a JSON object."""
    data = request.data
    if not isinstance(data, Mapping):
        raise ParseError("Request body must be a JSON object.")
    return data


class ProductViewSet(GenericViewSet):
    """ViewSet for Product CRUD operations.

    Uses ``ProductService`` with ``ProductDjangoRepository`` (DIP).
    Detail reads are keyed by SKU; writes are keyed by id and carry the
    version the client last saw.
    """

    serializer_class = ProductSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    @extend_schema(parameters=LIST_PARAMETERS, responses=ProductListSerializer)
    def list(self, request: Request) -> Response:
        """GET /api/v1/products/"""
        query = ProductListQuery.model_validate(request.query_params.dict())
        products = self._service.list_products(query)
        return Response(
            {
                "page": query.page,
                "limit": query.limit,
                "results": ProductSerializer(products, many=True).data,
            }
        )

    @action(detail=False, methods=["get"], url_path=r"sku/(?P<sku>[^/]+)")
    def by_sku(self, request: Request, sku: str | None = None) -> Response:
        """GET /api/v1/products/sku/{sku}/"""
        product = self._service.get_product_detail(sku or "")
        return Response(ProductSerializer(product).data)

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        data = _body(request)
        dto = CreateProductDTO.model_validate(
            {"sku": data.get("sku", ""), "productName": data.get("productName", "")}
        )
        product = self._service.create_product(dto)
        out = ProductSerializer(product)
        return Response(out.data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/products/{pk}/"""
        data = _body(request)
        dto = UpdateProductDTO.model_validate(
            {
                "version": data.get("version"),
                "sku": data.get("sku"),
                "productName": data.get("productName"),
            }
        )
        product = self._service.update_product(pk or "", dto)
        return Response(ProductSerializer(product).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/"""
        return self.update(request, pk)

    @extend_schema(parameters=[OpenApiParameter("version", int, required=True)])
    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}/?version=N"""
        version = request.query_params.get("version")
        if version is None and request.data:
            version = _body(request).get("version")
        dto = DeleteProductDTO(version=version)
        self._service.delete_product(pk or "", dto.version)
        return Response(status=status.HTTP_204_NO_CONTENT)
