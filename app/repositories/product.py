"""
Product repository for data access layer following Repository pattern
"""

from typing import Any, Dict, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from app.core.errors import StorageError
from app.core.logger import logger
from app.models.product import Product
from app.services.query_builder import QuerySpec


class ProductRepository:
    """Repository for product data access operations"""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    @staticmethod
    def _storage_error(operation: str, error: PyMongoError) -> StorageError:
        logger.error(
            f"MongoDB error during {operation}",
            error=error,
            metadata={"event": "storage_error", "operation": operation},
        )
        return StorageError(str(error))

    async def find(self, spec: QuerySpec) -> List[Product]:
        """Run a QuerySpec; sort is applied before skip/limit by the server"""
        try:
            cursor = self.collection.find(spec.filter)
            if spec.sort:
                cursor = cursor.sort(spec.sort)
            if spec.page is not None:
                cursor = cursor.skip(spec.skip).limit(spec.limit)
                docs = await cursor.to_list(length=spec.limit)
            else:
                docs = await cursor.to_list(length=None)
            return [Product.from_document(doc) for doc in docs]
        except PyMongoError as e:
            raise self._storage_error("find", e)

    async def count(self, query: Dict[str, Any]) -> int:
        try:
            return await self.collection.count_documents(query)
        except PyMongoError as e:
            raise self._storage_error("count", e)

    async def distinct_categories(self, query: Dict[str, Any]) -> List[str]:
        """Distinct non-empty category values, sorted"""
        try:
            values = await self.collection.distinct("category", query)
        except PyMongoError as e:
            raise self._storage_error("distinct", e)
        return sorted(v for v in values if v)

    async def get(self, query: Dict[str, Any]) -> Optional[Product]:
        try:
            doc = await self.collection.find_one(query)
        except PyMongoError as e:
            raise self._storage_error("find_one", e)
        return Product.from_document(doc) if doc else None

    async def insert(self, document: Dict[str, Any]) -> Product:
        """Insert a document and return it as stored"""
        try:
            result = await self.collection.insert_one(document)
        except PyMongoError as e:
            raise self._storage_error("insert", e)
        return Product.from_document({**document, "_id": result.inserted_id})

    async def replace_fields(
        self,
        query: Dict[str, Any],
        values: Dict[str, Any],
        remove: Iterable[str] = (),
    ) -> Optional[Product]:
        """Set ``values`` and unset ``remove`` on one document; None if nothing matched"""
        update: Dict[str, Any] = {"$set": values}
        removed = {name: "" for name in remove}
        if removed:
            update["$unset"] = removed

        try:
            doc = await self.collection.find_one_and_update(
                query, update, return_document=ReturnDocument.AFTER
            )
        except PyMongoError as e:
            raise self._storage_error("update", e)
        return Product.from_document(doc) if doc else None

    async def delete(self, query: Dict[str, Any]) -> Optional[Product]:
        """Hard delete one document, returning it as it was; None if nothing matched"""
        try:
            doc = await self.collection.find_one_and_delete(query)
        except PyMongoError as e:
            raise self._storage_error("delete", e)
        return Product.from_document(doc) if doc else None
