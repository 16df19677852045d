"""
Module: inventory_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for the
    services layer.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import inventory_kernel domain values, exceptions and logging.
    MUST NOT import inventory_services or inventory_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()``; the current instant is
      passed in by the caller.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine invocation is traced via ``@traced_engine`` (see
    ``inventory_engines.tracer``), emitting INVENTORY_ENGINE_TRACE records.
"""

from inventory_engines.indicators import (
    IndicatorParameters,
    IndicatorSummary,
    StockIndicator,
    StockIndicatorEngine,
    StockStatus,
    analysis_window,
)
from inventory_engines.purchase_order import (
    PURCHASE_ORDER_WORKFLOW,
    OrderTerms,
    PurchaseOrderDraft,
    PurchaseOrderDraftBuilder,
    PurchaseOrderLine,
    PurchaseOrderStatus,
    PurchaseOrderSubmission,
)
from inventory_engines.replenishment import (
    ReplenishmentSuggestion,
    ReplenishmentSuggestionAggregator,
    SuggestionKind,
)
from inventory_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "IndicatorParameters",
    "IndicatorSummary",
    "OrderTerms",
    "PURCHASE_ORDER_WORKFLOW",
    "PurchaseOrderDraft",
    "PurchaseOrderDraftBuilder",
    "PurchaseOrderLine",
    "PurchaseOrderStatus",
    "PurchaseOrderSubmission",
    "ReplenishmentSuggestion",
    "ReplenishmentSuggestionAggregator",
    "StockIndicator",
    "StockIndicatorEngine",
    "StockStatus",
    "SuggestionKind",
    "analysis_window",
    "compute_input_fingerprint",
    "traced_engine",
]
