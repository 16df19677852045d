"""
inventory_services.stock_service -- Public facade of the reconciliation engine.

Responsibility:
    The single caller-facing API (UI / HTTP layer): indicators and
    suggestions, purchase order drafting and dispatch, and the cycle count
    workflow.  Wires the count and replenishment services to one catalog
    repository, one session store, one clock and one policy.

Usage:
    from inventory_services import StockReconciliationService

    service = StockReconciliationService(repository, store, clock=clock)
    indicators = service.compute_indicators(period_days=30)
    session = service.start_count(CountScope.all(), "Maria")
    service.record_count(session.id, "item-1", 45)
    result = service.finish_count(session.id)

    # SQL-backed, inside the caller's transaction
    with session_scope() as db:
        service = StockReconciliationService.for_session(db)
"""

from __future__ import annotations

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from inventory_config import get_active_config
from inventory_config.schema import InventoryPolicy
from inventory_engines.indicators import IndicatorSummary, StockIndicator
from inventory_engines.purchase_order import PurchaseOrderDraft
from inventory_engines.replenishment import ReplenishmentSuggestion, SuggestionKind
from inventory_kernel.domain.catalog import CountScope
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.count_session import (
    CountEntry,
    CountProgress,
    CountSession,
    CountSummary,
)
from inventory_kernel.domain.ports import CatalogRepository, CountSessionStore
from inventory_kernel.services.catalog_repository import SqlCatalogRepository
from inventory_kernel.services.count_session_store import SqlCountSessionStore
from inventory_kernel.services.in_memory import InMemoryCountSessionStore
from inventory_services.adjustment_applier import AdjustmentReport
from inventory_services.count_service import CountSessionService, FinishResult
from inventory_services.replenishment_service import OrderDispatcher, ReplenishmentService


class StockReconciliationService:
    """Facade over CountSessionService and ReplenishmentService."""

    def __init__(
        self,
        repository: CatalogRepository,
        store: CountSessionStore | None = None,
        clock: Clock | None = None,
        policy: InventoryPolicy | None = None,
    ):
        self.policy = policy or get_active_config()
        self.clock = clock or SystemClock()
        self.repository = repository
        self.store = store if store is not None else InMemoryCountSessionStore()
        self.counts = CountSessionService(
            repository,
            self.store,
            clock=self.clock,
            allow_overlapping_scopes=self.policy.counting.allow_overlapping_scopes,
        )
        self.replenishment = ReplenishmentService(repository, policy=self.policy, clock=self.clock)

    @classmethod
    def for_session(
        cls,
        session: Session,
        clock: Clock | None = None,
        policy: InventoryPolicy | None = None,
    ) -> StockReconciliationService:
        """Facade over the SQL adapters bound to ``session``."""
        return cls(
            SqlCatalogRepository(session),
            SqlCountSessionStore(session),
            clock=clock,
            policy=policy,
        )

    # -- indicators and replenishment -------------------------------------

    def compute_indicators(self, period_days: int | None = None) -> list[StockIndicator]:
        return self.replenishment.compute_indicators(period_days)

    def indicator_summary(self, period_days: int | None = None) -> IndicatorSummary:
        return self.replenishment.indicator_summary(period_days)

    def generate_suggestions(
        self,
        period_days: int | None = None,
        kind: SuggestionKind | str | None = None,
    ) -> list[ReplenishmentSuggestion]:
        return self.replenishment.generate_suggestions(period_days, kind)

    def build_order_draft(
        self,
        suggestions: Sequence[ReplenishmentSuggestion],
        supplier_id: str | None = None,
        delivery_date: date | None = None,
        notes: str = "",
    ) -> PurchaseOrderDraft:
        return self.replenishment.build_order_draft(
            suggestions, supplier_id=supplier_id, delivery_date=delivery_date, notes=notes,
        )

    def dispatch_order(
        self,
        draft: PurchaseOrderDraft,
        dispatcher: OrderDispatcher,
    ) -> PurchaseOrderDraft:
        return self.replenishment.dispatch_order(draft, dispatcher)

    # -- cycle counts -----------------------------------------------------

    def start_count(self, scope: CountScope, responsible: str) -> CountSession:
        return self.counts.start(scope, responsible)

    def record_count(
        self,
        session_id: UUID,
        item_id: str,
        physical_qty: int | None,
    ) -> CountEntry:
        return self.counts.record_count(session_id, item_id, physical_qty)

    def count_progress(self, session_id: UUID) -> CountProgress:
        return self.counts.progress(session_id)

    def finish_count(self, session_id: UUID) -> FinishResult:
        return self.counts.finish(session_id)

    def cancel_count(self, session_id: UUID) -> CountSummary:
        return self.counts.cancel(session_id)

    def retry_adjustments(self, report: AdjustmentReport) -> AdjustmentReport:
        return self.counts.retry_adjustments(report)
