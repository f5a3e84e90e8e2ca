"""Translate untrusted listing parameters into a structured product query.

``build_product_query`` only parses. It never touches the database. The
resulting :class:`ProductQuery` knows how to compile itself into SQLAlchemy
predicates and an ordering for :mod:`product_service`.
"""
from __future__ import annotations

import enum
import json
import math
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple

from sqlalchemy import and_, false, or_, select

from catalog_api.core.exceptions import InvalidQueryException
from catalog_api.models.product import Product, ProductStatus
from catalog_api.models.product_attribute import ProductAttributeValue
from catalog_api.utils.pagination import compute_total_pages

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


class SortOption(str, enum.Enum):
    price_high = "price-high"
    price_low = "price-low"
    name_asc = "name"
    newest = "newest"

    @property
    def field(self) -> str:
        return _SORT_FIELDS[self][0]

    @property
    def descending(self) -> bool:
        return _SORT_FIELDS[self][1]

    @classmethod
    def parse(cls, raw: Optional[str]) -> "SortOption":
        try:
            return cls((raw or "").strip())
        except ValueError:
            return cls.newest


_SORT_FIELDS = {
    SortOption.price_high: ("price", True),
    SortOption.price_low: ("price", False),
    SortOption.name_asc: ("name", False),
    SortOption.newest: ("created_at", True),
}


@dataclass(frozen=True)
class ProductQuery:
    search: Optional[str] = None
    status: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    options: Tuple[str, ...] = ()
    sort: SortOption = SortOption.newest
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def pages(self, total: int) -> int:
        return compute_total_pages(total, self.limit)

    def to_conditions(self) -> List[Any]:
        conditions: List[Any] = []
        if self.search:
            pattern = f"%{_escape_like(self.search)}%"
            conditions.append(
                or_(
                    Product.name.ilike(pattern, escape="\\"),
                    Product.title.ilike(pattern, escape="\\"),
                )
            )
        if self.status:
            try:
                conditions.append(Product.status == ProductStatus(self.status))
            except ValueError:
                # Unknown status matches nothing
                conditions.append(false())
        if self.min_price is not None:
            conditions.append(Product.price >= self.min_price)
        if self.max_price is not None:
            conditions.append(Product.price <= self.max_price)
        if self.options:
            # Any selected option on any attribute qualifies
            matching = select(ProductAttributeValue.product_id).where(
                ProductAttributeValue.value.in_(self.options)
            )
            conditions.append(Product.id.in_(matching))
        return conditions

    def where_clause(self):
        conditions = self.to_conditions()
        return and_(*conditions) if conditions else None

    def order_by(self) -> List[Any]:
        column = getattr(Product, self.sort.field)
        primary = column.desc() if self.sort.descending else column.asc()
        # Tie-breaker keeps page boundaries stable between requests
        return [primary, Product.id.asc()]


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _clean(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None


def _parse_price(name: str, raw: Any) -> Optional[float]:
    text = _clean(raw)
    if text is None:
        return None
    try:
        value = float(text)
    except ValueError:
        raise InvalidQueryException(name, raw)
    if math.isnan(value) or math.isinf(value):
        raise InvalidQueryException(name, raw)
    return value


def _parse_positive_int(raw: Any, default: int) -> int:
    text = _clean(raw)
    if text is None:
        return default
    try:
        value = int(text)
    except ValueError:
        return default
    return value if value >= 1 else default


def _parse_options(raw: Any) -> Tuple[str, ...]:
    text = _clean(raw)
    if text is None:
        return ()
    try:
        decoded = json.loads(text)
    except ValueError:
        decoded = text.split(",")

    if isinstance(decoded, str):
        decoded = [decoded]
    if not isinstance(decoded, list):
        raise InvalidQueryException("attributes", raw)

    options: List[str] = []
    for item in decoded:
        if not isinstance(item, str):
            raise InvalidQueryException("attributes", raw)
        item = item.strip()
        if item and item not in options:
            options.append(item)
    return tuple(options)


def build_product_query(params: Mapping[str, Any], default_limit: int = DEFAULT_LIMIT) -> ProductQuery:
    """Build a :class:`ProductQuery` from raw ``GET /products`` parameters.

    Price bounds and the attribute list reject malformed input. Sort, page
    and limit fall back to their defaults instead.
    """
    return ProductQuery(
        search=_clean(params.get("search")),
        status=_clean(params.get("status")),
        min_price=_parse_price("minPrice", params.get("minPrice")),
        max_price=_parse_price("maxPrice", params.get("maxPrice")),
        options=_parse_options(params.get("attributes")),
        sort=SortOption.parse(params.get("sortBy")),
        page=_parse_positive_int(params.get("page"), DEFAULT_PAGE),
        limit=_parse_positive_int(params.get("limit"), default_limit),
    )
