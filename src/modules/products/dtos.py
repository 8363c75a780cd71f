"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF views) and the
Service layer.  DTOs are immutable (``frozen=True``) and accept both the
API's camelCase names (``productName``) and the Python field names.

- ``CreateProductDTO``: input for product creation.
- ``UpdateProductDTO``: input for partial updates, carrying ``version``.
- ``DeleteProductDTO``: the version a delete is conditioned on.
- ``ProductListQuery``: filters and pagination for listing.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

DEFAULT_LIST_LIMIT = 10
MAX_LIST_LIMIT = 100
# Keeps the SQL OFFSET within a signed 64-bit integer.
MAX_PAGE = (2**63 - 1) // MAX_LIST_LIMIT


def _clean_sku(v: str) -> str:
    """Trim ``v``; a SKU is addressed in the URL path, so ``/`` is refused."""
    v = v.strip()
    if not v:
        raise ValueError("SKU must not be empty.")
    if "/" in v:
        raise ValueError("SKU must not contain '/'.")
    return v


def _reject_bool(v: Any) -> Any:
    if isinstance(v, bool):
        raise ValueError("Version must be an integer.")
    return v


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    Validates:
    - ``sku`` is a non-empty string without ``/`` (trimmed, case preserved).
    - ``product_name`` is a non-empty string.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sku: str = Field(max_length=64)
    product_name: str = Field(alias="productName", max_length=255)

    @field_validator("sku")
    @classmethod
    def sku_must_be_addressable(cls, v: str) -> str:
        return _clean_sku(v)

    @field_validator("product_name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Product name must not be empty.")
        return v.strip()


class UpdateProductDTO(BaseModel):
    """Immutable DTO for product update requests.

    ``version`` is the version the caller last read; every other field is
    optional and only supplied fields are written.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: int = Field(ge=1)
    sku: Optional[str] = Field(default=None, max_length=64)
    product_name: Optional[str] = Field(
        default=None, alias="productName", max_length=255
    )

    @field_validator("version", mode="before")
    @classmethod
    def version_is_not_bool(cls, v: Any) -> Any:
        return _reject_bool(v)

    @field_validator("sku")
    @classmethod
    def sku_must_be_addressable(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _clean_sku(v)

    @field_validator("product_name")
    @classmethod
    def must_not_be_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not v.strip():
            raise ValueError("Field must not be blank.")
        return v.strip()

    def changes(self) -> Dict[str, Any]:
        """Fields to write, keyed by model field name."""
        return self.model_dump(exclude_none=True, exclude={"version"})


class DeleteProductDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: int = Field(ge=1)

    @field_validator("version", mode="before")
    @classmethod
    def version_is_not_bool(cls, v: Any) -> Any:
        return _reject_bool(v)


class ProductListQuery(BaseModel):
    """Filters and pagination for the product list.

    ``skus`` stays the raw quoted-array string (``"['A1','A2']"``); it is
    decoded by the filter builder so malformed input surfaces as a domain
    error rather than a DTO error.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    skus: Optional[str] = None
    product_name: Optional[str] = Field(default=None, alias="productName")
    search_true: bool = Field(default=False, alias="searchTrue")
    page: int = Field(default=1, ge=1, le=MAX_PAGE)
    limit: int = Field(default=DEFAULT_LIST_LIMIT, ge=1)
    from_date: Optional[date] = Field(default=None, alias="fromDate")
    to_date: Optional[date] = Field(default=None, alias="toDate")

    @field_validator("skus", "product_name", "from_date", "to_date", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("search_true", "page", "limit", mode="before")
    @classmethod
    def blank_means_default(cls, v: Any, info: ValidationInfo) -> Any:
        if isinstance(v, str) and not v.strip():
            return cls.model_fields[info.field_name].default
        return v

    @field_validator("limit")
    @classmethod
    def clamp_limit(cls, v: int) -> int:
        return min(v, MAX_LIST_LIMIT)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
