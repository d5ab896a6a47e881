"""
Request middleware for the Product Catalog Service
"""

from .correlation_id import CorrelationIdMiddleware, get_correlation_id, set_correlation_id

__all__ = ["CorrelationIdMiddleware", "get_correlation_id", "set_correlation_id"]
