"""
inventory_services.replenishment_service -- Indicators, suggestions and purchase orders.

Responsibility:
    Fetch the stock snapshot and purchase history from the catalog
    repository, run the pure engines with parameters taken from the
    active policy, and hand validated purchase orders to an external
    ``OrderDispatcher``.

Architecture position:
    Services -- orchestration over inventory_engines and the catalog port.
    The only layer that translates ``InventoryPolicy`` into engine
    parameters.

Invariants enforced:
    - Movements are fetched for the same inclusive window the indicator
      engine analyses.
    - Purchase history is fetched only for items that produce a suggestion.
    - ``dispatch_order`` advances a draft to SENT only after the
      dispatcher reports success; it is the only automatic status change.

Failure modes:
    - InvalidPeriodError for a non-positive or non-int period.
    - EmptyOrderError / MissingSupplierError / InvalidOrderLineError when
      dispatching an incomplete draft.
    - InvalidOrderTransitionError when dispatching a non-DRAFT order.
    - OrderDispatchError when the dispatcher fails or reports failure.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence, runtime_checkable

from inventory_config.schema import InventoryPolicy
from inventory_engines.indicators import (
    IndicatorParameters,
    IndicatorSummary,
    StockIndicator,
    StockIndicatorEngine,
    StockStatus,
    analysis_window,
    validate_period,
)
from inventory_engines.purchase_order import (
    PURCHASE_ORDER_WORKFLOW,
    OrderTerms,
    PurchaseOrderDraft,
    PurchaseOrderDraftBuilder,
    PurchaseOrderSubmission,
)
from inventory_engines.replenishment import (
    ReplenishmentSuggestion,
    ReplenishmentSuggestionAggregator,
    SuggestionKind,
)
from inventory_kernel.domain.catalog import StockSnapshot
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.ports import CatalogRepository
from inventory_kernel.exceptions import InvalidOrderTransitionError, OrderDispatchError
from inventory_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.replenishment")


@runtime_checkable
class OrderDispatcher(Protocol):
    """Sends a validated order to the supplier (e-mail, EDI, ...)."""

    def send(self, submission: PurchaseOrderSubmission) -> bool:
        """True when the supplier channel accepted the order."""
        ...


def indicator_parameters(policy: InventoryPolicy) -> IndicatorParameters:
    r = policy.replenishment
    return IndicatorParameters(
        default_min_quantity=r.default_min_quantity,
        default_max_quantity=r.default_max_quantity,
        safety_days=r.safety_days,
        coverage_days=r.coverage_days,
        running_low_days=r.running_low_days,
    )


def order_terms(policy: InventoryPolicy) -> OrderTerms:
    o = policy.ordering
    return OrderTerms(
        payment_terms=o.payment_terms,
        freight=o.freight,
        currency=o.currency,
        default_unit=o.default_unit,
    )


class ReplenishmentService:
    """Read path from catalog data to purchase order drafts."""

    def __init__(
        self,
        repository: CatalogRepository,
        policy: InventoryPolicy | None = None,
        clock: Clock | None = None,
    ):
        self.repository = repository
        self.policy = policy or InventoryPolicy()
        self.clock = clock or SystemClock()
        self.indicator_engine = StockIndicatorEngine(indicator_parameters(self.policy))
        self.aggregator = ReplenishmentSuggestionAggregator(
            history_depth=self.policy.replenishment.purchase_history_depth,
        )
        self.order_builder = PurchaseOrderDraftBuilder(order_terms(self.policy))

    def _period(self, period_days: int | None) -> int:
        if period_days is None:
            return self.policy.replenishment.default_period_days
        return validate_period(period_days)

    def snapshot(self, period_days: int | None = None) -> StockSnapshot:
        """Catalog items plus their movements inside the analysis window."""
        period = self._period(period_days)
        now = self.clock.now()
        since, until = analysis_window(now, period)
        items = self.repository.list_items()
        movements = self.repository.list_movements([item.id for item in items], since, until)
        logger.debug(
            "stock_snapshot_taken",
            extra={
                "item_count": len(items),
                "movement_count": len(movements),
                "window_start": since.isoformat(),
                "window_end": until.isoformat(),
            },
        )
        return StockSnapshot.of(items, movements, now)

    def compute_indicators(self, period_days: int | None = None) -> list[StockIndicator]:
        period = self._period(period_days)
        snapshot = self.snapshot(period)
        return self.indicator_engine.compute(
            snapshot=snapshot, period_days=period, now=snapshot.taken_at,
        )

    def indicator_summary(self, period_days: int | None = None) -> IndicatorSummary:
        return self.indicator_engine.summarize(
            indicators=self.compute_indicators(period_days),
        )

    def generate_suggestions(
        self,
        period_days: int | None = None,
        kind: SuggestionKind | str | None = None,
    ) -> list[ReplenishmentSuggestion]:
        """Ordered suggestions; ``kind`` keeps only ``critical`` or ``low``."""
        wanted = SuggestionKind(kind) if kind is not None else None
        indicators = self.compute_indicators(period_days)
        actionable = (StockStatus.CRITICAL, StockStatus.WARNING)
        purchases = {
            indicator.item_id: self.repository.list_last_purchases(indicator.item_id)
            for indicator in indicators
            if indicator.status in actionable
        }
        return self.aggregator.aggregate(
            indicators=indicators, purchases=purchases, kind=wanted,
        )

    def build_order_draft(
        self,
        suggestions: Sequence[ReplenishmentSuggestion],
        supplier_id: str | None = None,
        delivery_date: date | None = None,
        notes: str = "",
    ) -> PurchaseOrderDraft:
        return self.order_builder.build(
            suggestions=suggestions,
            created_at=self.clock.now(),
            supplier_id=supplier_id,
            delivery_date=delivery_date,
            notes=notes,
        )

    def dispatch_order(
        self,
        draft: PurchaseOrderDraft,
        dispatcher: OrderDispatcher,
    ) -> PurchaseOrderDraft:
        """
        Validate, send and mark the order SENT.

        Raises:
            InvalidOrderTransitionError: the order is not a DRAFT.
            EmptyOrderError / MissingSupplierError / InvalidOrderLineError:
                the draft is incomplete.
            OrderDispatchError: the dispatcher failed; the draft is unchanged.
        """
        if PURCHASE_ORDER_WORKFLOW.resolve(draft.status.value, "dispatch") is None:
            raise InvalidOrderTransitionError(str(draft.id), draft.status.value, "dispatch")
        submission = draft.to_submission()

        with LogContext.bind(draft_id=str(draft.id)):
            try:
                accepted = dispatcher.send(submission)
            except OrderDispatchError:
                raise
            except Exception as exc:
                logger.error(
                    "purchase_order_dispatch_failed",
                    extra={"supplier_id": submission.supplier_id},
                    exc_info=True,
                )
                raise OrderDispatchError(str(draft.id), f"{type(exc).__name__}: {exc}") from exc

            if not accepted:
                logger.warning(
                    "purchase_order_dispatch_rejected",
                    extra={"supplier_id": submission.supplier_id},
                )
                raise OrderDispatchError(str(draft.id), "dispatcher reported failure")

            logger.info(
                "purchase_order_dispatched",
                extra={
                    "supplier_id": submission.supplier_id,
                    "line_count": len(submission.lines),
                    "total": str(submission.total),
                },
            )
            return draft.transition("dispatch")
