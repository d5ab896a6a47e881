"""
Models module initialization
"""

from .claims import AuthClaims, ADMIN_ROLE
from .product import Product, DEFAULT_CATEGORY, SORTABLE_FIELDS

__all__ = [
    "AuthClaims",
    "ADMIN_ROLE",
    "Product",
    "DEFAULT_CATEGORY",
    "SORTABLE_FIELDS",
]
