"""
Count Session (``inventory_kernel.domain.count_session``).

Responsibility
--------------
The cycle-count reconciliation unit: a session scoped to the whole catalog
or one category that freezes the book quantity of every in-scope item at
start, accepts physical counts while ACTIVE, and closes exactly once by
``finish`` (COMPLETED) or ``cancel`` (CANCELLED).

Architecture
------------
Layer: **Kernel domain** -- stateful entity, zero I/O.  The session never
writes to the catalog itself; ``finish`` hands the divergent entries to the
caller, which runs the AdjustmentApplier.  Persistence is done by a
``CountSessionStore`` adapter.

Invariants
----------
- ``system_qty`` values are snapshotted at ``start`` and never refreshed.
- At most one ``CountEntry`` per item; an item never counted has no entry.
- ``difference`` is defined iff ``physical_qty`` is present.
- After COMPLETED or CANCELLED the session is immutable.

Failure Modes
-------------
- ``EmptyResponsibleError`` / ``EmptyCountScopeError`` from ``start``.
- ``SessionNotActiveError`` from ``record_count``/``finish``/``cancel``
  once the session is closed.
- ``ItemNotInScopeError`` / ``InvalidCountValueError`` / ``NegativeCountError``
  from ``record_count``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping
from uuid import UUID, uuid4

from inventory_kernel.domain.catalog import CatalogItem, CountScope
from inventory_kernel.domain.clock import Clock
from inventory_kernel.domain.workflow import Transition, Workflow
from inventory_kernel.exceptions import (
    EmptyCountScopeError,
    EmptyResponsibleError,
    InvalidCountValueError,
    ItemNotInScopeError,
    NegativeCountError,
    SessionNotActiveError,
)
from inventory_kernel.logging_config import get_logger

logger = get_logger("domain.count_session")


class CountSessionStatus(str, Enum):
    """Lifecycle state of a count session."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EntryStatus(str, Enum):
    """Reconciliation state of one counted item."""

    PENDING = "pending"      # touched, but no physical quantity now
    OK = "ok"                # physical == system
    DIVERGENT = "divergent"  # physical != system


COUNT_SESSION_WORKFLOW = Workflow(
    name="count_session",
    description="Cycle count session lifecycle",
    initial_state=CountSessionStatus.ACTIVE.value,
    states=(
        CountSessionStatus.ACTIVE.value,
        CountSessionStatus.COMPLETED.value,
        CountSessionStatus.CANCELLED.value,
    ),
    transitions=(
        Transition("active", "active", action="record_count"),
        Transition("active", "completed", action="finish", writes_catalog=True),
        Transition("active", "cancelled", action="cancel"),
    ),
    terminal_states=("completed", "cancelled"),
)


@dataclass(frozen=True)
class CountEntry:
    """
    The count of one item within a session.

    Contract: Immutable; recounting replaces the entry.  ``system_qty`` is the
    book quantity frozen at session start.
    """
    item_id: str
    system_qty: int
    physical_qty: int | None = None
    counted_at: datetime | None = None

    @property
    def difference(self) -> int | None:
        """``physical_qty - system_qty``; None while not counted."""
        if self.physical_qty is None:
            return None
        return self.physical_qty - self.system_qty

    @property
    def entry_status(self) -> EntryStatus:
        diff = self.difference
        if diff is None:
            return EntryStatus.PENDING
        if diff == 0:
            return EntryStatus.OK
        return EntryStatus.DIVERGENT

    @property
    def is_counted(self) -> bool:
        return self.physical_qty is not None

    @property
    def is_divergent(self) -> bool:
        return self.entry_status == EntryStatus.DIVERGENT


@dataclass(frozen=True)
class CountProgress:
    """Progress of a session, derived from its current entries."""
    total_in_scope: int
    counted_count: int
    pending_count: int
    divergence_count: int

    @property
    def ratio(self) -> float:
        """Counted items over items in scope (0.0 - 1.0)."""
        if self.total_in_scope == 0:
            return 0.0
        return self.counted_count / self.total_in_scope


@dataclass(frozen=True)
class CountSummary:
    """Closing record of a session, produced by both finish and cancel."""
    session_id: UUID
    status: CountSessionStatus
    scope: CountScope
    responsible: str
    total_in_scope: int
    items_counted: int
    divergence_count: int
    adjustment_count: int
    closed_at: datetime | None


class CountSession:
    """
    A cycle-count session.

    Contract:
        Created by ``start`` in ACTIVE; mutated only by ``record_count``
        while ACTIVE; terminated exactly once by ``finish`` or ``cancel``.
    Guarantees:
        - The baseline (item id -> system quantity) is a read-only mapping.
        - ``entries`` preserves the order in which items were first touched.
        - ``progress()`` is a pure derivation and may be polled in any state.
    Non-goals:
        - Does not write catalog quantities (AdjustmentApplier does).
        - Does not guard against overlapping sessions (the service does).
    """

    def __init__(
        self,
        *,
        session_id: UUID,
        scope: CountScope,
        responsible: str,
        started_at: datetime,
        baseline: Mapping[str, int],
        status: CountSessionStatus = CountSessionStatus.ACTIVE,
        entries: Iterable[CountEntry] = (),
        closed_at: datetime | None = None,
    ):
        self._id = session_id
        self._scope = scope
        self._responsible = responsible
        self._started_at = started_at
        self._baseline = MappingProxyType(dict(baseline))
        self._status = status
        self._entries: dict[str, CountEntry] = {e.item_id: e for e in entries}
        self._closed_at = closed_at

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def start(
        cls,
        scope: CountScope,
        responsible: str | None,
        items: Iterable[CatalogItem],
        clock: Clock,
        session_id: UUID | None = None,
    ) -> CountSession:
        """
        Open a session and snapshot the book quantity of every in-scope item.

        Preconditions:
            - ``responsible`` is a non-blank name.
            - At least one non-deleted item of ``items`` falls in ``scope``.

        Raises:
            EmptyResponsibleError: blank responsible.
            EmptyCountScopeError: nothing to count in scope.
        """
        name = (responsible or "").strip()
        if not name:
            raise EmptyResponsibleError(responsible)

        baseline = {
            item.id: item.quantity
            for item in items
            if not item.is_deleted and scope.includes(item)
        }
        if not baseline:
            raise EmptyCountScopeError(scope.kind.value, scope.category_id)

        session = cls(
            session_id=session_id or uuid4(),
            scope=scope,
            responsible=name,
            started_at=clock.now(),
            baseline=baseline,
        )
        logger.info(
            "count_session_started",
            extra={
                "session_id": str(session.id),
                "scope": str(scope),
                "responsible": name,
                "total_in_scope": len(baseline),
            },
        )
        return session

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def scope(self) -> CountScope:
        return self._scope

    @property
    def responsible(self) -> str:
        return self._responsible

    @property
    def status(self) -> CountSessionStatus:
        return self._status

    @property
    def started_at(self) -> datetime:
        return self._started_at

    @property
    def closed_at(self) -> datetime | None:
        return self._closed_at

    @property
    def baseline(self) -> Mapping[str, int]:
        return self._baseline

    @property
    def entries(self) -> Mapping[str, CountEntry]:
        return MappingProxyType(self._entries)

    @property
    def is_active(self) -> bool:
        return self._status == CountSessionStatus.ACTIVE

    def entry(self, item_id: str) -> CountEntry | None:
        return self._entries.get(item_id)

    def divergent_entries(self) -> tuple[CountEntry, ...]:
        """Every entry with a physical count that differs from the book."""
        return tuple(e for e in self._entries.values() if e.is_divergent)

    def progress(self) -> CountProgress:
        counted = sum(1 for e in self._entries.values() if e.is_counted)
        total = len(self._baseline)
        return CountProgress(
            total_in_scope=total,
            counted_count=counted,
            pending_count=total - counted,
            divergence_count=len(self.divergent_entries()),
        )

    def summary(self, adjustment_count: int = 0) -> CountSummary:
        progress = self.progress()
        return CountSummary(
            session_id=self._id,
            status=self._status,
            scope=self._scope,
            responsible=self._responsible,
            total_in_scope=progress.total_in_scope,
            items_counted=progress.counted_count,
            divergence_count=progress.divergence_count,
            adjustment_count=adjustment_count,
            closed_at=self._closed_at,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _require(self, action: str) -> Transition:
        transition = COUNT_SESSION_WORKFLOW.resolve(self._status.value, action)
        if transition is None:
            logger.warning(
                "count_session_transition_rejected",
                extra={
                    "session_id": str(self._id),
                    "status": self._status.value,
                    "action": action,
                },
            )
            raise SessionNotActiveError(str(self._id), self._status.value, action)
        return transition

    def record_count(
        self,
        item_id: str,
        physical_qty: int | None,
        clock: Clock,
    ) -> CountEntry:
        """
        Record (or overwrite) the physical count of an item.

        ``physical_qty=None`` clears a previous count: the entry stays and
        goes back to PENDING.

        Raises:
            SessionNotActiveError: session is closed.
            ItemNotInScopeError: item was not snapshotted at start.
            InvalidCountValueError: value is not an int (bool rejected).
            NegativeCountError: value below zero.
        """
        self._require("record_count")
        if item_id not in self._baseline:
            raise ItemNotInScopeError(str(self._id), item_id)
        if physical_qty is not None:
            if isinstance(physical_qty, bool) or not isinstance(physical_qty, int):
                raise InvalidCountValueError(item_id, physical_qty)
            if physical_qty < 0:
                raise NegativeCountError(item_id, physical_qty)

        previous = self._entries.get(item_id)
        if previous is None:
            entry = CountEntry(
                item_id=item_id,
                system_qty=self._baseline[item_id],
                physical_qty=physical_qty,
                counted_at=clock.now() if physical_qty is not None else None,
            )
        else:
            entry = replace(
                previous,
                physical_qty=physical_qty,
                counted_at=clock.now() if physical_qty is not None else None,
            )
        self._entries[item_id] = entry

        logger.debug(
            "count_recorded",
            extra={
                "session_id": str(self._id),
                "item_id": item_id,
                "system_qty": entry.system_qty,
                "physical_qty": physical_qty,
                "entry_status": entry.entry_status.value,
                "recount": previous is not None,
            },
        )
        return entry

    def clear_count(self, item_id: str, clock: Clock) -> CountEntry:
        """Mark an item as not yet counted again."""
        return self.record_count(item_id, None, clock)

    def finish(self, clock: Clock) -> tuple[CountEntry, ...]:
        """
        Close the session as COMPLETED and return its divergent entries.

        The caller must hand the returned entries to the AdjustmentApplier.

        Raises:
            SessionNotActiveError: session already closed.
        """
        self._require("finish")
        divergent = self.divergent_entries()
        self._status = CountSessionStatus.COMPLETED
        self._closed_at = clock.now()
        logger.info(
            "count_session_completed",
            extra={
                "session_id": str(self._id),
                "items_counted": self.progress().counted_count,
                "divergence_count": len(divergent),
            },
        )
        return divergent

    def cancel(self, clock: Clock) -> CountSummary:
        """
        Close the session as CANCELLED.  Never produces adjustments.

        Raises:
            SessionNotActiveError: session already closed.
        """
        self._require("cancel")
        self._status = CountSessionStatus.CANCELLED
        self._closed_at = clock.now()
        logger.info("count_session_cancelled", extra={"session_id": str(self._id)})
        return self.summary(adjustment_count=0)

    def __repr__(self) -> str:
        return (
            f"<CountSession {self._id} scope={self._scope} status={self._status.value} "
            f"entries={len(self._entries)}/{len(self._baseline)}>"
        )
