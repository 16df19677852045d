"""
Module: inventory_engines.replenishment
Responsibility:
    Turn stock indicators into an ordered list of replenishment
    suggestions, each priced from the item's purchase history.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The purchase history is
    fetched by the service and passed in as a mapping.

Invariants enforced:
    - Only CRITICAL and WARNING indicators produce suggestions; they are
      surfaced as ``critical`` and ``low``.
    - A critical suggestion is never for zero units (minimum 1).
    - ``reference_price`` is the unit price of the most recent purchase
      that has one, else Decimal("0") (no price data, not an error).
    - Ordering: critical before low, then ascending days until stockout
      with unknown horizons last, then item id.

Usage:
    from inventory_engines.replenishment import ReplenishmentSuggestionAggregator

    aggregator = ReplenishmentSuggestionAggregator(history_depth=5)
    suggestions = aggregator.aggregate(indicators=indicators, purchases=history)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Mapping, Sequence

from inventory_kernel.domain.catalog import ItemKind, PurchaseRecord
from inventory_kernel.logging_config import get_logger
from inventory_engines.indicators import StockIndicator, StockStatus
from inventory_engines.tracer import traced_engine

logger = get_logger("engines.replenishment")

ZERO = Decimal("0")


class SuggestionKind(str, Enum):
    """Urgency of a replenishment suggestion."""

    CRITICAL = "critical"
    LOW = "low"


_KIND_BY_STATUS = {
    StockStatus.CRITICAL: SuggestionKind.CRITICAL,
    StockStatus.WARNING: SuggestionKind.LOW,
}


@dataclass(frozen=True)
class ReplenishmentSuggestion:
    """A proposal to buy ``suggested_quantity`` units of one item."""
    item_id: str
    kind: SuggestionKind
    suggested_quantity: int
    reference_price: Decimal
    item_name: str
    current_stock: int
    min_stock: int
    days_until_stockout: int | None
    reference_supplier_id: str | None = None
    best_price: Decimal | None = None
    sku: str | None = None
    unit: str = "UN"
    item_kind: ItemKind = ItemKind.PRODUCT
    last_purchases: tuple[PurchaseRecord, ...] = ()

    @property
    def has_price(self) -> bool:
        return self.reference_price > ZERO

    @property
    def estimated_total(self) -> Decimal:
        return self.reference_price * self.suggested_quantity


def _sort_key(suggestion: ReplenishmentSuggestion) -> tuple:
    days = suggestion.days_until_stockout
    return (
        0 if suggestion.kind == SuggestionKind.CRITICAL else 1,
        days is None,
        days if days is not None else 0,
        suggestion.item_id,
    )


class ReplenishmentSuggestionAggregator:
    """
    Pure suggestion builder.

    Contract:
        ``aggregate`` selects the actionable indicators, prices them from
        the supplied purchase history and returns them in urgency order.
    """

    def __init__(self, history_depth: int = 5):
        if history_depth < 0:
            raise ValueError("history_depth cannot be negative")
        self.history_depth = history_depth

    def price_reference(
        self,
        purchases: Sequence[PurchaseRecord],
    ) -> PurchaseRecord | None:
        """Most recent purchase (input is most-recent-first) carrying a unit price."""
        for record in purchases:
            if record.unit_price is not None:
                return record
        return None

    def suggestion_for(
        self,
        indicator: StockIndicator,
        purchases: Sequence[PurchaseRecord],
    ) -> ReplenishmentSuggestion | None:
        kind = _KIND_BY_STATUS.get(indicator.status)
        if kind is None:
            return None

        quantity = indicator.reorder_suggestion
        if kind == SuggestionKind.CRITICAL:
            quantity = max(quantity, 1)

        reference = self.price_reference(purchases)
        priced = [p.unit_price for p in purchases if p.unit_price is not None]

        return ReplenishmentSuggestion(
            item_id=indicator.item_id,
            kind=kind,
            suggested_quantity=quantity,
            reference_price=reference.unit_price if reference is not None else ZERO,
            item_name=indicator.item_name,
            current_stock=indicator.current_stock,
            min_stock=indicator.min_stock,
            days_until_stockout=indicator.days_until_stockout,
            reference_supplier_id=(
                reference.supplier_id
                if reference is not None and reference.supplier_id
                else indicator.supplier_id
            ),
            best_price=min(priced) if priced else None,
            sku=indicator.sku,
            unit=indicator.unit,
            item_kind=indicator.item_kind,
            last_purchases=tuple(purchases)[: self.history_depth],
        )

    @traced_engine("replenishment", "1.0", fingerprint_fields=("kind",))
    def aggregate(
        self,
        indicators: Sequence[StockIndicator],
        purchases: Mapping[str, Sequence[PurchaseRecord]] | None = None,
        kind: SuggestionKind | None = None,
    ) -> list[ReplenishmentSuggestion]:
        """
        Build the ordered suggestion list.

        Args:
            indicators: Output of StockIndicatorEngine.compute.
            purchases: Item id -> purchase history, most-recent-first.
            kind: Keep only suggestions of this kind (None keeps all).
        """
        purchases = purchases or {}
        suggestions = []
        for indicator in indicators:
            suggestion = self.suggestion_for(indicator, purchases.get(indicator.item_id, ()))
            if suggestion is None:
                continue
            if kind is not None and suggestion.kind != kind:
                continue
            suggestions.append(suggestion)

        suggestions.sort(key=_sort_key)

        logger.info(
            "suggestions_generated",
            extra={
                "indicator_count": len(indicators),
                "suggestion_count": len(suggestions),
                "critical_count": sum(1 for s in suggestions if s.kind == SuggestionKind.CRITICAL),
                "unpriced_count": sum(1 for s in suggestions if not s.has_price),
                "kind_filter": kind.value if kind is not None else None,
            },
        )
        return suggestions
