"""
API module initialization
"""

from . import products, health

__all__ = ["products", "health"]
