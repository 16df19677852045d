"""Read-only query selectors."""

from inventory_kernel.selectors.base import BaseSelector
from inventory_kernel.selectors.catalog_selector import CatalogSelector, CountSessionSelector

__all__ = [
    "BaseSelector",
    "CatalogSelector",
    "CountSessionSelector",
]
