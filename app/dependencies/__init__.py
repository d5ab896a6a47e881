"""
Dependencies module initialization
"""

from .auth import admin_body, get_current_claims, get_token_verifier, require_admin
from .product import get_product_service

__all__ = [
    "admin_body",
    "get_current_claims",
    "get_token_verifier",
    "require_admin",
    "get_product_service",
]
