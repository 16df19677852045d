"""
inventory_services.count_service -- Cycle count session orchestration.

Responsibility:
    Start, record into, finish and cancel count sessions kept in a
    ``CountSessionStore``; run the AdjustmentApplier on finish; enforce
    the overlapping-scope policy.

Architecture position:
    Services -- stateful orchestration over the kernel count session
    entity, the catalog repository and the session store.

Invariants enforced:
    - Unless ``allow_overlapping_scopes`` is set, a new session is refused
      while an ACTIVE session covers any of the same items.
    - Every mutation of a session is saved back to the store before the
      call returns.
    - ``finish`` always yields a summary, with or without divergences, and
      reports the session COMPLETED even when some writes failed.

Failure modes:
    - CountSessionNotFoundError for unknown session ids.
    - CountScopeConflictError for an overlapping start.
    - Validation and state errors of ``CountSession`` propagate unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from inventory_kernel.domain.catalog import CountScope
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.count_session import (
    CountEntry,
    CountProgress,
    CountSession,
    CountSummary,
)
from inventory_kernel.domain.ports import CatalogRepository, CountSessionStore
from inventory_kernel.exceptions import CountScopeConflictError, CountSessionNotFoundError
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_services.adjustment_applier import AdjustmentApplier, AdjustmentReport

logger = get_logger("services.count")


@dataclass(frozen=True)
class FinishResult:
    """Closing summary plus the outcome of the adjustment pass."""
    summary: CountSummary
    adjustment_report: AdjustmentReport


class CountSessionService:
    """Operator-facing count workflow."""

    def __init__(
        self,
        repository: CatalogRepository,
        store: CountSessionStore,
        clock: Clock | None = None,
        allow_overlapping_scopes: bool = False,
        applier: AdjustmentApplier | None = None,
    ):
        self.repository = repository
        self.store = store
        self.clock = clock or SystemClock()
        self.allow_overlapping_scopes = allow_overlapping_scopes
        self.applier = applier or AdjustmentApplier(repository)

    def get(self, session_id: UUID) -> CountSession:
        session = self.store.get(session_id)
        if session is None:
            raise CountSessionNotFoundError(str(session_id))
        return session

    def list_active(self) -> list[CountSession]:
        return self.store.list_active()

    def start(self, scope: CountScope, responsible: str) -> CountSession:
        """
        Open a new session over ``scope``.

        Raises:
            CountScopeConflictError: an ACTIVE session overlaps ``scope``.
            EmptyResponsibleError / EmptyCountScopeError: from CountSession.start.
        """
        if not self.allow_overlapping_scopes:
            for active in self.store.list_active():
                if active.scope.overlaps(scope):
                    logger.warning(
                        "count_scope_conflict",
                        extra={
                            "requested_scope": str(scope),
                            "conflicting_session_id": str(active.id),
                        },
                    )
                    raise CountScopeConflictError(str(scope), str(active.id))

        items = self.repository.list_items(scope)
        session = CountSession.start(scope, responsible, items, self.clock)
        self.store.add(session)
        return session

    def record_count(
        self,
        session_id: UUID,
        item_id: str,
        physical_qty: int | None,
    ) -> CountEntry:
        session = self.get(session_id)
        with LogContext.bind(session_id=str(session_id)):
            entry = session.record_count(item_id, physical_qty, self.clock)
            self.store.save(session)
        return entry

    def clear_count(self, session_id: UUID, item_id: str) -> CountEntry:
        return self.record_count(session_id, item_id, None)

    def progress(self, session_id: UUID) -> CountProgress:
        return self.get(session_id).progress()

    def finish(self, session_id: UUID) -> FinishResult:
        """
        Complete the session and apply its divergences to the catalog.

        ``summary.adjustment_count`` counts the writes that succeeded; the
        failed ones are listed in ``adjustment_report.failed``.
        """
        session = self.get(session_id)
        with LogContext.bind(session_id=str(session_id)):
            session.finish(self.clock)
            self.store.save(session)
            report = self.applier.apply(session)
            summary = session.summary(adjustment_count=len(report.succeeded))
            logger.info(
                "count_session_finished",
                extra={
                    "items_counted": summary.items_counted,
                    "divergence_count": summary.divergence_count,
                    "adjustment_count": summary.adjustment_count,
                    "failed_writes": len(report.failed),
                },
            )
        return FinishResult(summary=summary, adjustment_report=report)

    def cancel(self, session_id: UUID) -> CountSummary:
        session = self.get(session_id)
        with LogContext.bind(session_id=str(session_id)):
            summary = session.cancel(self.clock)
            self.store.save(session)
        return summary

    def retry_adjustments(self, report: AdjustmentReport) -> AdjustmentReport:
        with LogContext.bind(session_id=str(report.session_id)):
            return self.applier.retry(report)
