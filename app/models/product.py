"""
Canonical Product model

One schema serves every deployment; which optional fields are in play is decided by
the CatalogProfile, not by forking the model. Stored documents use the camelCase
field names that also appear on the wire.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_CATEGORY = "Uncategorized"

# Writable attributes, keyed by stored field name
REQUIRED_FIELDS = ("name", "unitPrice", "quantity")
OPTIONAL_FIELDS = ("description", "category", "imageUrl", "sku", "expiry", "active")

# Optional attributes that exist only when the catalog profile enables them
PROFILE_FIELDS = {"sku": "sku", "expiry": "expiry", "active": "active"}

SORTABLE_FIELDS = ("name", "unitPrice", "quantity", "category", "createdAt")
DEFAULT_SORT_FIELD = "name"


def utc_now():
    """Current UTC time at the millisecond precision BSON dates keep"""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class Product(BaseModel):
    """Product as stored, with the store-assigned id exposed as a string"""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    quantity: Optional[int] = None
    unit_price: Optional[float] = Field(None, alias="unitPrice")
    image_url: Optional[str] = Field(None, alias="imageUrl")
    sku: Optional[str] = None
    expiry: Optional[datetime] = None
    active: Optional[bool] = None
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    @classmethod
    def from_document(cls, doc: dict) -> "Product":
        """Build a Product from a raw MongoDB document"""
        data = dict(doc)
        data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)

    def to_response(self) -> dict:
        """Wire representation; fields absent from the record are omitted"""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
