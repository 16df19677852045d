"""ORM models for the inventory kernel."""

from inventory_kernel.models.catalog import (
    CatalogItemModel,
    PurchaseHistoryModel,
    StockMovementModel,
)
from inventory_kernel.models.count_session import (
    CountSessionLineModel,
    CountSessionModel,
)

__all__ = [
    "CatalogItemModel",
    "StockMovementModel",
    "PurchaseHistoryModel",
    "CountSessionModel",
    "CountSessionLineModel",
]
