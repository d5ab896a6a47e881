"""Shared test fixtures"""
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import jwt
import pytest
from bson import ObjectId

from app.core.config import CatalogProfile
from app.models.claims import AuthClaims
from app.models.product import Product
from app.repositories.product import ProductRepository

TEST_SECRET = "test-secret"
PRODUCT_ID = "507f1f77bcf86cd799439011"
OTHER_PRODUCT_ID = "507f1f77bcf86cd799439012"


def make_token(role="admin", subject="admin123", secret=TEST_SECRET, expires_in=None, **claims):
    """Sign a token the way the issuing service would"""
    payload = {"id": subject, "role": role, **claims}
    if role is None:
        payload.pop("role")
    if subject is None:
        payload.pop("id")
    if expires_in is not None:
        payload["exp"] = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
    return jwt.encode(payload, secret, algorithm="HS256")


def make_product(product_id=PRODUCT_ID, **fields):
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)
    doc = {
        "_id": ObjectId(product_id),
        "name": "Blue Widget",
        "description": "A widget",
        "category": "Gadgets",
        "quantity": 5,
        "unitPrice": 9.99,
        "imageUrl": "",
        "active": True,
        "createdAt": now,
        "updatedAt": now,
    }
    doc.update(fields)
    return Product.from_document(doc)


@pytest.fixture
def profile():
    """Default deployment: active flag and SKU enabled, no expiry"""
    return CatalogProfile()


@pytest.fixture
def mock_repository():
    """ProductRepository with every coroutine mocked"""
    return AsyncMock(spec=ProductRepository)


@pytest.fixture
def admin_claims():
    return AuthClaims(subject_id="admin123", role="admin")


@pytest.fixture
def sample_product():
    return make_product()


@pytest.fixture
def product_id():
    return PRODUCT_ID


@pytest.fixture
def other_product_id():
    return OTHER_PRODUCT_ID


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def product_factory():
    return make_product
