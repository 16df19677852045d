"""
Module: inventory_services
Responsibility:
    Stateful orchestration over the pure engines and the kernel ports:
    the adjustment applier, the count workflow, the replenishment read
    path and the ``StockReconciliationService`` facade.

Architecture position:
    Services -- may import inventory_engines, inventory_kernel and
    inventory_config.  Nothing inside the kernel or the engines imports
    from here.
"""

from inventory_services.adjustment_applier import (
    AdjustmentApplier,
    AdjustmentReport,
    AppliedAdjustment,
)
from inventory_services.count_service import CountSessionService, FinishResult
from inventory_services.replenishment_service import OrderDispatcher, ReplenishmentService
from inventory_services.stock_service import StockReconciliationService

__all__ = [
    "AdjustmentApplier",
    "AdjustmentReport",
    "AppliedAdjustment",
    "CountSessionService",
    "FinishResult",
    "OrderDispatcher",
    "ReplenishmentService",
    "StockReconciliationService",
]
