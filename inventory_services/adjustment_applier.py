"""
inventory_services.adjustment_applier -- Write count divergences back to the catalog.

Responsibility:
    After a count session is COMPLETED, overwrite the book quantity of
    every divergent item with its physical count.  Each write is attempted
    independently; failures are collected in an ``AdjustmentReport`` so the
    operator can retry exactly those items.

Architecture position:
    Services -- the only component that mutates catalog state.  Depends on
    the ``CatalogRepository`` port; knows nothing about the backing store.

Invariants enforced:
    - Only a COMPLETED session is applied (never ACTIVE or CANCELLED).
    - The adjustment is an overwrite (physical wins), not a delta.
    - Fail-open: a failed write never prevents the remaining writes.
    - A session without divergences attempts zero writes.

Failure modes:
    - SessionNotCompletedError when the session is not COMPLETED.
    - Per-item write failures (False return or exception) become
      ``AdjustmentWriteError`` entries in the report; they are logged,
      never raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable
from uuid import UUID

from inventory_kernel.domain.count_session import (
    CountEntry,
    CountSession,
    CountSessionStatus,
)
from inventory_kernel.domain.ports import CatalogRepository
from inventory_kernel.exceptions import AdjustmentWriteError, SessionNotCompletedError
from inventory_kernel.logging_config import get_logger

logger = get_logger("services.adjustment_applier")


@dataclass(frozen=True)
class AppliedAdjustment:
    """A catalog write that succeeded."""
    item_id: str
    system_qty: int
    physical_qty: int

    @property
    def difference(self) -> int:
        return self.physical_qty - self.system_qty


@dataclass(frozen=True)
class AdjustmentReport:
    """Outcome of one apply (or retry) pass."""
    session_id: UUID
    attempted: int
    succeeded: tuple[AppliedAdjustment, ...] = ()
    failed: tuple[AdjustmentWriteError, ...] = ()
    # Entries behind ``failed``, kept for retry
    failed_entries: tuple[CountEntry, ...] = field(default=(), repr=False, compare=False)

    @property
    def is_complete(self) -> bool:
        return not self.failed

    @property
    def failed_item_ids(self) -> tuple[str, ...]:
        return tuple(error.item_id for error in self.failed)


class AdjustmentApplier:
    """
    Applies count divergences through the catalog repository.

    Contract:
        ``apply`` writes every divergent entry of a COMPLETED session and
        reports per item; ``retry`` re-attempts the failed items of a
        previous report.
    Non-goals:
        - No cross-item transaction; writes are sequential and independent.
    """

    def __init__(self, repository: CatalogRepository):
        self.repository = repository

    def apply(self, session: CountSession) -> AdjustmentReport:
        """
        Apply the divergences of a completed session.

        Raises:
            SessionNotCompletedError: session is ACTIVE or CANCELLED.
        """
        if session.status != CountSessionStatus.COMPLETED:
            raise SessionNotCompletedError(str(session.id), session.status.value)
        return self._write_all(session.id, session.divergent_entries(), retry=False)

    def retry(self, report: AdjustmentReport) -> AdjustmentReport:
        """Re-attempt exactly the failed writes of ``report``."""
        return self._write_all(report.session_id, report.failed_entries, retry=True)

    def _write_all(
        self,
        session_id: UUID,
        entries: Iterable[CountEntry],
        retry: bool,
    ) -> AdjustmentReport:
        entries = tuple(entries)
        succeeded: list[AppliedAdjustment] = []
        failed: list[AdjustmentWriteError] = []
        failed_entries: list[CountEntry] = []

        for entry in entries:
            error = self._write(entry)
            if error is None:
                succeeded.append(
                    AppliedAdjustment(
                        item_id=entry.item_id,
                        system_qty=entry.system_qty,
                        physical_qty=entry.physical_qty,
                    )
                )
            else:
                failed.append(error)
                failed_entries.append(entry)

        report = AdjustmentReport(
            session_id=session_id,
            attempted=len(entries),
            succeeded=tuple(succeeded),
            failed=tuple(failed),
            failed_entries=tuple(failed_entries),
        )
        log = logger.info if report.is_complete else logger.warning
        log(
            "adjustments_applied",
            extra={
                "session_id": str(session_id),
                "retry": retry,
                "attempted": report.attempted,
                "succeeded": len(report.succeeded),
                "failed": len(report.failed),
                "failed_item_ids": list(report.failed_item_ids),
            },
        )
        return report

    def _write(self, entry: CountEntry) -> AdjustmentWriteError | None:
        try:
            ok = self.repository.write_quantity(entry.item_id, entry.physical_qty)
        except Exception as exc:  # fail-open: collected, reported, retried by the operator
            logger.warning(
                "adjustment_write_failed",
                extra={
                    "item_id": entry.item_id,
                    "target_quantity": entry.physical_qty,
                    "error_type": type(exc).__name__,
                },
                exc_info=True,
            )
            return AdjustmentWriteError(
                entry.item_id, entry.physical_qty, f"{type(exc).__name__}: {exc}",
            )

        if not ok:
            logger.warning(
                "adjustment_write_failed",
                extra={
                    "item_id": entry.item_id,
                    "target_quantity": entry.physical_qty,
                    "error_type": None,
                },
            )
            return AdjustmentWriteError(
                entry.item_id, entry.physical_qty, "catalog rejected the write",
            )
        return None
