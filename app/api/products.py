"""
Product API endpoints following FastAPI best practices
Clean API layer with dependency injection

Literal path segments (search, category, filter, sort, categories,
bulk-update-stock) are registered before the ``/{product_id}`` routes so they are
never captured as an id.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.errors import ErrorResponseModel
from app.dependencies.auth import admin_body, require_admin
from app.dependencies.product import get_product_service
from app.models.claims import AuthClaims
from app.schemas.product import BulkStockUpdateRequest, ProductCreate, ProductUpdate
from app.services.product import ProductService

router = APIRouter()

ADMIN_RESPONSES = {
    400: {"model": ErrorResponseModel},
    401: {"model": ErrorResponseModel},
    403: {"model": ErrorResponseModel},
}


# Public listing and search

@router.get("")
async def list_products(
    page: Optional[str] = Query(None, description="Page number, 1-based"),
    limit: Optional[str] = Query(None, description="Page size; 0 or absent returns everything"),
    service: ProductService = Depends(get_product_service),
):
    """
    List products, newest first.
    Pagination metadata is only included when a positive limit is given.
    """
    envelope = await service.list_products(page, limit)
    return envelope.to_response()


@router.get("/categories", tags=["categories"])
async def get_categories(service: ProductService = Depends(get_product_service)):
    """Distinct, non-empty product categories"""
    envelope = await service.categories()
    return envelope.to_response()


@router.get("/search/{keyword}")
async def search_products(keyword: str, service: ProductService = Depends(get_product_service)):
    """Case-insensitive substring search over name, description, category and SKU"""
    envelope = await service.search(keyword)
    return envelope.to_response()


@router.get("/category/{category}")
async def products_by_category(category: str, service: ProductService = Depends(get_product_service)):
    """Products whose category contains the given text (case-insensitive)"""
    envelope = await service.by_category(category)
    return envelope.to_response()


# Filters

@router.get("/filter/active", responses={404: {"model": ErrorResponseModel}})
async def active_products(service: ProductService = Depends(get_product_service)):
    envelope = await service.active()
    return envelope.to_response()


@router.get("/filter/lowstock/{threshold}")
async def low_stock_products(threshold: str, service: ProductService = Depends(get_product_service)):
    """Products with 0 < quantity <= threshold (threshold defaults to 10)"""
    envelope = await service.low_stock(threshold)
    return envelope.to_response()


@router.get("/filter/expired", responses={404: {"model": ErrorResponseModel}})
async def expired_products(service: ProductService = Depends(get_product_service)):
    envelope = await service.expired()
    return envelope.to_response()


@router.get("/filter/price")
async def price_range_products(
    min: Optional[str] = Query(None, description="Minimum unit price, inclusive"),
    max: Optional[str] = Query(None, description="Maximum unit price, inclusive"),
    service: ProductService = Depends(get_product_service),
):
    envelope = await service.price_range(min, max)
    return envelope.to_response()


@router.get("/filter/instock")
async def in_stock_products(service: ProductService = Depends(get_product_service)):
    envelope = await service.in_stock()
    return envelope.to_response()


@router.get("/filter/outofstock")
async def out_of_stock_products(service: ProductService = Depends(get_product_service)):
    envelope = await service.out_of_stock()
    return envelope.to_response()


@router.get("/sort/{field}/{order}")
async def sorted_products(field: str, order: str, service: ProductService = Depends(get_product_service)):
    """
    Sort by an allow-listed field (name, unitPrice, quantity, category, createdAt).
    Unknown fields sort by name; any order other than "desc" is ascending.
    """
    envelope = await service.sorted_by(field, order)
    return envelope.to_response()


# Admin operations

@router.post("", status_code=status.HTTP_201_CREATED, responses=ADMIN_RESPONSES)
async def create_product(
    product: ProductCreate = Depends(admin_body(ProductCreate)),
    claims: AuthClaims = Depends(require_admin),
    service: ProductService = Depends(get_product_service),
):
    """Create a product. Requires an admin token."""
    envelope = await service.create_product(product, claims)
    return envelope.to_response()


@router.put("/bulk-update-stock", responses={**ADMIN_RESPONSES, 404: {"model": ErrorResponseModel}})
async def bulk_update_stock(
    payload: BulkStockUpdateRequest = Depends(admin_body(BulkStockUpdateRequest)),
    claims: AuthClaims = Depends(require_admin),
    service: ProductService = Depends(get_product_service),
):
    """
    Set quantities for several products at once. Requires an admin token.
    Not atomic: one failing entry fails the response, other entries may already be saved.
    """
    envelope = await service.bulk_update_stock(payload, claims)
    return envelope.to_response()


# Single product

@router.get("/{product_id}", responses={404: {"model": ErrorResponseModel}})
async def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    """Get a product by its ID."""
    envelope = await service.get_product(product_id)
    return envelope.to_response()


@router.put("/{product_id}", responses={**ADMIN_RESPONSES, 404: {"model": ErrorResponseModel}})
async def update_product(
    product_id: str,
    product: ProductUpdate = Depends(admin_body(ProductUpdate)),
    claims: AuthClaims = Depends(require_admin),
    service: ProductService = Depends(get_product_service),
):
    """
    Replace a product's fields. Requires an admin token.
    Optional fields left out of the body are removed from the product.
    """
    envelope = await service.update_product(product_id, product, claims)
    return envelope.to_response()


@router.delete("/{product_id}", responses={**ADMIN_RESPONSES, 404: {"model": ErrorResponseModel}})
async def delete_product(
    product_id: str,
    claims: AuthClaims = Depends(require_admin),
    service: ProductService = Depends(get_product_service),
):
    """Permanently delete a product. Requires an admin token."""
    envelope = await service.delete_product(product_id, claims)
    return envelope.to_response()
