"""
API schemas for Product endpoints following FastAPI best practices
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from app.models.product import DEFAULT_CATEGORY


class ProductCreate(BaseModel):
    """Schema for creating a new product; unset optionals take catalog defaults"""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    description: str = ""
    category: str = DEFAULT_CATEGORY
    quantity: int = Field(0, ge=0)
    unit_price: float = Field(..., alias="unitPrice")
    image_url: str = Field("", alias="imageUrl")
    sku: Optional[str] = None
    expiry: Optional[datetime] = None
    active: bool = True

    @field_validator("description", "category", "quantity", "image_url", "active", mode="before")
    @classmethod
    def blank_means_default(cls, value, info: ValidationInfo):
        """null and "" count as not supplied"""
        if value is None or value == "":
            return cls.model_fields[info.field_name].default
        return value


class ProductUpdate(BaseModel):
    """
    Schema for replacing a product's writable fields.

    This is a replace, not a merge: every optional field left out of the request is
    removed from the stored record. ``name``, ``unitPrice`` and ``quantity`` must
    always be supplied so a replace can never strip them.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    unit_price: float = Field(..., alias="unitPrice")
    quantity: int = Field(..., ge=0)
    description: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    sku: Optional[str] = None
    expiry: Optional[datetime] = None
    active: Optional[bool] = None


class StockUpdate(BaseModel):
    id: str
    quantity: int = Field(..., ge=0)


class BulkStockUpdateRequest(BaseModel):
    updates: List[StockUpdate]


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class Envelope(BaseModel):
    """Uniform response wrapper; unset members are left out of the payload"""

    success: bool = True
    message: Optional[str] = None
    data: Any = None
    pagination: Optional[Pagination] = None
    count: Optional[int] = None

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True, mode="json")
