"""
Core module initialization
"""

from .config import config, CatalogProfile

__all__ = [
    "config",
    "CatalogProfile",
]
