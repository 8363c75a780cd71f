"""Query construction for the product list.

A ``ProductFilter`` is an ordered tuple of typed clauses, each of which
knows how to render itself as a Django ``Q``.  The clauses are conjoined;
the live-only restriction is applied by the repository, not here.

- ``SkuInClause``: sku is one of a decoded list.
- ``NameMatchClause``: exact or case-insensitive substring name match.
- ``CreatedAtRangeClause``: inclusive local-day range on ``created_at``;
  either bound may be open.
"""

from __future__ import annotations

import json
import operator
from dataclasses import dataclass
from datetime import date, datetime, time
from functools import reduce
from typing import List, Optional, Tuple, Union

from django.db.models import Q
from django.utils import timezone

from modules.products.dtos import ProductListQuery
from modules.products.exceptions import InvalidSkuFilter

PRODUCT_LIST_ORDERING = ("-created_at", "-id")

END_OF_DAY = time(23, 59, 59, 999000)


def parse_skus(raw: str) -> List[str]:
    """Decode ``"['A1','A2']"`` into ``["A1", "A2"]``.

    Single quotes are swapped for double quotes before JSON decoding, so a
    SKU containing a quote character cannot be expressed.  Members are
    trimmed the same way a detail lookup trims its SKU.
    """
    try:
        decoded = json.loads(raw.replace("'", '"'))
    except (ValueError, RecursionError) as exc:
        raise InvalidSkuFilter(f"Malformed skus filter: {raw!r}.") from exc
    if not isinstance(decoded, list) or not all(isinstance(s, str) for s in decoded):
        raise InvalidSkuFilter(f"skus filter must be a list of strings: {raw!r}.")
    return [sku.strip() for sku in decoded]


def start_of_day(day: date) -> datetime:
    return timezone.make_aware(datetime.combine(day, time.min))


def end_of_day(day: date) -> datetime:
    return timezone.make_aware(datetime.combine(day, END_OF_DAY))


# ---------------------------------------------------------------------------
# Clauses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SkuInClause:
    skus: Tuple[str, ...]

    def to_q(self) -> Q:
        return Q(sku__in=self.skus)


@dataclass(frozen=True)
class NameMatchClause:
    name: str
    exact: bool

    def to_q(self) -> Q:
        if self.exact:
            return Q(product_name=self.name)
        return Q(product_name__icontains=self.name)


@dataclass(frozen=True)
class CreatedAtRangeClause:
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def to_q(self) -> Q:
        q = Q()
        if self.start is not None:
            q &= Q(created_at__gte=self.start)
        if self.end is not None:
            q &= Q(created_at__lte=self.end)
        return q


FilterClause = Union[SkuInClause, NameMatchClause, CreatedAtRangeClause]


@dataclass(frozen=True)
class ProductFilter:
    clauses: Tuple[FilterClause, ...] = ()

    @classmethod
    def from_query(cls, query: ProductListQuery) -> ProductFilter:
        """Build the clause list for a list request.

        Raises:
            InvalidSkuFilter: if ``query.skus`` cannot be decoded.
        """
        clauses: List[FilterClause] = []

        if query.skus:
            skus = parse_skus(query.skus)
            if skus:
                clauses.append(SkuInClause(skus=tuple(skus)))

        if query.product_name:
            clauses.append(
                NameMatchClause(name=query.product_name, exact=query.search_true)
            )

        if query.from_date or query.to_date:
            clauses.append(
                CreatedAtRangeClause(
                    start=start_of_day(query.from_date) if query.from_date else None,
                    end=end_of_day(query.to_date) if query.to_date else None,
                )
            )

        return cls(clauses=tuple(clauses))

    def to_q(self) -> Q:
        return reduce(operator.and_, (clause.to_q() for clause in self.clauses), Q())
