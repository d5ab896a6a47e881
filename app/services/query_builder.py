"""
Query composition for catalog reads.

Every public read route is a thin adapter onto one representation, ``QuerySpec``:
a MongoDB filter document, an optional sort, and optional skip/limit paging.

Numeric route parameters are parsed permissively: anything that does not start
with a number, or parses to zero, falls back to the route's default. Sort fields
are the opposite: they are checked against an allow-list and never reach the
store verbatim.
"""

import math
import re
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING

from app.core.config import CatalogProfile
from app.core.errors import NotFound
from app.models.product import DEFAULT_SORT_FIELD, SORTABLE_FIELDS

DEFAULT_PAGE = 1
DEFAULT_LOW_STOCK_THRESHOLD = 10
DEFAULT_MIN_PRICE = 0.0
DEFAULT_MAX_PRICE = sys.float_info.max

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_int(value: Optional[str], default: int) -> int:
    """Leading integer of ``value``; ``default`` when absent, non-numeric or zero"""
    if value is None:
        return default
    match = _INT_PREFIX.match(str(value))
    if not match:
        return default
    return int(match.group(1)) or default


def parse_float(value: Optional[str], default: float) -> float:
    """Leading number of ``value``; ``default`` when absent, non-numeric or zero"""
    if value is None:
        return default
    match = _FLOAT_PREFIX.match(str(value))
    if not match:
        return default
    number = float(match.group(1))
    if not math.isfinite(number) or number == 0:
        return default
    return number


def contains(text: str) -> Dict[str, str]:
    """Case-insensitive literal substring match"""
    return {"$regex": re.escape(text), "$options": "i"}


@dataclass
class PageRequest:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class QuerySpec:
    filter: Dict[str, Any] = field(default_factory=dict)
    sort: List[Tuple[str, int]] = field(default_factory=list)
    page: Optional[PageRequest] = None

    @property
    def skip(self) -> int:
        return self.page.skip if self.page else 0

    @property
    def limit(self) -> int:
        return self.page.limit if self.page else 0


class QueryBuilder:
    """Builds QuerySpecs for one catalog profile"""

    def __init__(self, profile: CatalogProfile):
        self.profile = profile

    def visibility(self) -> Dict[str, Any]:
        """Base filter for public listings"""
        return {"active": True} if self.profile.active else {}

    def _visible(self, **conditions) -> Dict[str, Any]:
        return {**self.visibility(), **conditions}

    def search_fields(self) -> List[str]:
        fields = ["name", "description", "category"]
        if self.profile.sku:
            fields.append("sku")
        return fields

    def list(self, page: Optional[str] = None, limit: Optional[str] = None) -> QuerySpec:
        """Newest first; ``limit`` of zero means the whole collection in one page"""
        page_number = parse_int(page, DEFAULT_PAGE)
        page_size = parse_int(limit, 0)
        return QuerySpec(
            filter=self.visibility(),
            sort=[("createdAt", DESCENDING)],
            page=PageRequest(page_number, page_size) if page_size > 0 else None,
        )

    def search(self, keyword: str) -> QuerySpec:
        pattern = contains(keyword or "")
        return QuerySpec(filter=self._visible(**{
            "$or": [{name: pattern} for name in self.search_fields()]
        }))

    def by_category(self, category: str) -> QuerySpec:
        return QuerySpec(filter=self._visible(category=contains(category or "")))

    def active(self) -> QuerySpec:
        if not self.profile.active:
            raise NotFound("Active filtering is not enabled")
        return QuerySpec(filter={"active": True})

    def low_stock(self, threshold: Optional[str] = None) -> QuerySpec:
        # Zero quantity is out of stock, not low stock
        limit = parse_int(threshold, DEFAULT_LOW_STOCK_THRESHOLD)
        return QuerySpec(filter={"quantity": {"$gt": 0, "$lte": limit}})

    def expired(self, now: Optional[datetime] = None) -> QuerySpec:
        if not self.profile.expiry:
            raise NotFound("Expiry filtering is not enabled")
        return QuerySpec(filter={"expiry": {"$lt": now or datetime.now(timezone.utc)}})

    def price_range(self, min_price: Optional[str] = None, max_price: Optional[str] = None) -> QuerySpec:
        low = parse_float(min_price, DEFAULT_MIN_PRICE)
        high = parse_float(max_price, DEFAULT_MAX_PRICE)
        return QuerySpec(filter=self._visible(unitPrice={"$gte": low, "$lte": high}))

    def in_stock(self) -> QuerySpec:
        return QuerySpec(filter=self._visible(quantity={"$gt": 0}))

    def out_of_stock(self) -> QuerySpec:
        return QuerySpec(filter=self._visible(quantity=0))

    def sorted_by(self, field_name: str, order: str) -> QuerySpec:
        sort_field = field_name if field_name in SORTABLE_FIELDS else DEFAULT_SORT_FIELD
        direction = DESCENDING if order == "desc" else ASCENDING
        return QuerySpec(filter=self.visibility(), sort=[(sort_field, direction)])

    def categories(self) -> Dict[str, Any]:
        """Filter for the category facet; empty values are dropped again after distinct"""
        return self._visible(category={"$nin": [None, ""]})

    def by_id(self, product_id: str) -> Dict[str, Any]:
        """Exact id match; ids that are not ObjectIds cannot exist"""
        if not product_id or not ObjectId.is_valid(product_id):
            raise NotFound()
        return {"_id": ObjectId(product_id)}


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 1
