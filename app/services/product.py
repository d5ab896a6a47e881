"""
Product service containing business logic layer
"""

import asyncio
from typing import Any, Dict, List, Optional

from app.core.config import CatalogProfile
from app.core.errors import NotFound
from app.core.logger import logger
from app.models.claims import AuthClaims
from app.models.product import OPTIONAL_FIELDS, PROFILE_FIELDS, Product, utc_now
from app.repositories.product import ProductRepository
from app.schemas.product import (
    BulkStockUpdateRequest,
    Envelope,
    Pagination,
    ProductCreate,
    ProductUpdate,
    StockUpdate,
)
from app.services.query_builder import QueryBuilder, QuerySpec, page_count


class ProductService:
    """Catalog use-cases; each returns a response Envelope"""

    def __init__(self, repository: ProductRepository, profile: CatalogProfile):
        self.repository = repository
        self.profile = profile
        self.queries = QueryBuilder(profile)

    def _enabled(self, field_name: str) -> bool:
        flag = PROFILE_FIELDS.get(field_name)
        return flag is None or getattr(self.profile, flag)

    def _writable(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Drop attributes the catalog profile does not carry"""
        return {k: v for k, v in document.items() if self._enabled(k)}

    @staticmethod
    def _data(products: List[Product]) -> List[Dict[str, Any]]:
        return [p.to_response() for p in products]

    async def _run(self, spec: QuerySpec, event: str, with_count: bool = False) -> Envelope:
        products = await self.repository.find(spec)
        logger.info(
            f"Fetched {len(products)} products",
            metadata={"event": event, "count": len(products)},
        )
        return Envelope(data=self._data(products), count=len(products) if with_count else None)

    # Reads

    async def list_products(self, page: Optional[str] = None, limit: Optional[str] = None) -> Envelope:
        spec = self.queries.list(page, limit)
        products = await self.repository.find(spec)

        pagination = None
        if spec.page is not None:
            total = await self.repository.count(spec.filter)
            pagination = Pagination(
                page=spec.page.page,
                limit=spec.page.limit,
                total=total,
                pages=page_count(total, spec.page.limit),
            )

        logger.info(
            f"Fetched {len(products)} products",
            metadata={
                "event": "list_products",
                "count": len(products),
                "page": spec.page.page if spec.page else None,
                "limit": spec.limit,
            },
        )
        return Envelope(data=self._data(products), pagination=pagination)

    async def search(self, keyword: str) -> Envelope:
        return await self._run(self.queries.search(keyword), "search_products")

    async def by_category(self, category: str) -> Envelope:
        return await self._run(self.queries.by_category(category), "products_by_category")

    async def active(self) -> Envelope:
        return await self._run(self.queries.active(), "active_products")

    async def low_stock(self, threshold: Optional[str] = None) -> Envelope:
        return await self._run(self.queries.low_stock(threshold), "low_stock_products", with_count=True)

    async def expired(self) -> Envelope:
        return await self._run(self.queries.expired(), "expired_products")

    async def price_range(self, min_price: Optional[str] = None, max_price: Optional[str] = None) -> Envelope:
        return await self._run(self.queries.price_range(min_price, max_price), "price_range_products")

    async def in_stock(self) -> Envelope:
        return await self._run(self.queries.in_stock(), "in_stock_products")

    async def out_of_stock(self) -> Envelope:
        return await self._run(self.queries.out_of_stock(), "out_of_stock_products")

    async def sorted_by(self, field_name: str, order: str) -> Envelope:
        return await self._run(self.queries.sorted_by(field_name, order), "sorted_products")

    async def categories(self) -> Envelope:
        categories = await self.repository.distinct_categories(self.queries.categories())
        logger.info(
            f"Fetched {len(categories)} categories",
            metadata={"event": "categories_fetched", "count": len(categories)},
        )
        return Envelope(data=categories)

    async def get_product(self, product_id: str) -> Envelope:
        product = await self.repository.get(self.queries.by_id(product_id))
        if product is None:
            raise NotFound()
        return Envelope(data=product.to_response())

    # Writes (callers are admitted by the access gate before reaching these)

    async def create_product(self, payload: ProductCreate, claims: AuthClaims) -> Envelope:
        now = utc_now()
        document = self._writable(payload.model_dump(by_alias=True))
        if document.get("sku") is None:
            document.pop("sku", None)
        if document.get("expiry") is None:
            document.pop("expiry", None)
        document.update({"createdAt": now, "updatedAt": now})

        product = await self.repository.insert(document)

        logger.info(
            f"Created product {product.id}",
            user_id=claims.subject_id,
            metadata={"event": "create_product", "product_id": product.id},
        )
        return Envelope(message="Product created!", data=product.to_response())

    async def update_product(self, product_id: str, payload: ProductUpdate, claims: AuthClaims) -> Envelope:
        """Replace the writable fields; optional fields missing from the payload are unset"""
        query = self.queries.by_id(product_id)

        values = self._writable(payload.model_dump(by_alias=True, exclude_unset=True))
        values = {k: v for k, v in values.items() if v is not None}
        removed = [name for name in OPTIONAL_FIELDS if name not in values and self._enabled(name)]
        values["updatedAt"] = utc_now()

        product = await self.repository.replace_fields(query, values, removed)
        if product is None:
            raise NotFound()

        logger.info(
            f"Updated product {product_id}",
            user_id=claims.subject_id,
            metadata={"event": "update_product", "product_id": product_id, "unset": removed},
        )
        return Envelope(message="Product updated!", data=product.to_response())

    async def _update_stock(self, item: StockUpdate) -> Product:
        product = await self.repository.replace_fields(
            self.queries.by_id(item.id),
            {"quantity": item.quantity, "updatedAt": utc_now()},
        )
        if product is None:
            raise NotFound(f"Product not found: {item.id}")
        return product

    async def bulk_update_stock(self, payload: BulkStockUpdateRequest, claims: AuthClaims) -> Envelope:
        """
        Apply every stock update concurrently.

        The batch is neither ordered nor atomic: the first failing entry fails the
        whole call, while updates for the other entries may already be written.
        """
        products = await asyncio.gather(*(self._update_stock(item) for item in payload.updates))

        logger.info(
            f"Updated stock for {len(products)} products",
            user_id=claims.subject_id,
            metadata={"event": "bulk_update_stock", "count": len(products)},
        )
        return Envelope(message="Stock updated for multiple products", data=self._data(products))

    async def delete_product(self, product_id: str, claims: AuthClaims) -> Envelope:
        product = await self.repository.delete(self.queries.by_id(product_id))
        if product is None:
            raise NotFound()

        logger.info(
            f"Deleted product {product_id}",
            user_id=claims.subject_id,
            metadata={"event": "delete_product", "product_id": product_id},
        )
        return Envelope(message="Product deleted!", data=product.to_response())
