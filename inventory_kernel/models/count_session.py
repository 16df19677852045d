"""
Module: inventory_kernel.models.count_session
Responsibility: ORM persistence for count sessions and their per-item lines.
Architecture position: Kernel > Models.  May import from db/base.py and the
    pure domain count session (for conversion).

Invariants enforced:
    - status is one of 'active', 'completed', 'cancelled' (check constraint).
    - One line per (session, item) pair; a line is written for every item in
      the baseline so that the frozen system quantity survives reloads.
    - ``touched`` distinguishes an item never counted (no CountEntry) from
      one whose count was cleared (entry back to PENDING).

Failure modes:
    - IntegrityError on duplicate session_id or duplicate (session, item) line.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inventory_kernel.db.base import TrackedBase, UUIDString
from inventory_kernel.domain.catalog import CountScope, CountScopeKind
from inventory_kernel.domain.count_session import (
    CountEntry,
    CountSession,
    CountSessionStatus,
)
from inventory_kernel.models.catalog import as_utc


class CountSessionModel(TrackedBase):
    """
    Persistent count session header.

    Contract:
        Terminal statuses (completed, cancelled) are never changed once set;
        the domain entity refuses the transition before a save is attempted.
    """

    __tablename__ = "count_sessions"

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'completed', 'cancelled')",
            name="ck_count_session_status",
        ),
        CheckConstraint(
            "scope_kind IN ('all', 'category')",
            name="ck_count_session_scope_kind",
        ),
        Index("idx_count_session_status", "status"),
    )

    session_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False, unique=True)
    scope_kind: Mapped[str] = mapped_column(String(20), nullable=False)
    category_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    responsible: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    lines: Mapped[list["CountSessionLineModel"]] = relationship(
        "CountSessionLineModel",
        back_populates="session",
        primaryjoin="CountSessionModel.session_id == CountSessionLineModel.session_id",
        order_by="CountSessionLineModel.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<CountSession {self.session_id} {self.scope_kind} status={self.status}>"

    def to_domain(self) -> CountSession:
        """Rebuild the domain entity, baseline and entries included."""
        lines = list(self.lines)
        entries = sorted(
            (line for line in lines if line.touched),
            key=lambda line: (line.touched_order or 0, line.position),
        )
        return CountSession(
            session_id=self.session_id,
            scope=CountScope(CountScopeKind(self.scope_kind), self.category_id),
            responsible=self.responsible,
            started_at=as_utc(self.started_at),
            baseline={line.item_code: line.system_qty for line in lines},
            status=CountSessionStatus(self.status),
            entries=[line.to_entry() for line in entries],
            closed_at=as_utc(self.closed_at),
        )

    @classmethod
    def from_domain(cls, session: CountSession) -> CountSessionModel:
        """Create the ORM rows (header and one line per baseline item)."""
        model = cls(
            session_id=session.id,
            scope_kind=session.scope.kind.value,
            category_id=session.scope.category_id,
            responsible=session.responsible,
            started_at=session.started_at,
        )
        model.lines = [
            CountSessionLineModel(
                session_id=session.id,
                item_code=item_id,
                position=position,
                system_qty=system_qty,
            )
            for position, (item_id, system_qty) in enumerate(session.baseline.items())
        ]
        model.apply(session)
        return model

    def apply(self, session: CountSession) -> None:
        """Copy status and entries of the domain entity onto existing rows."""
        self.status = session.status.value
        self.closed_at = session.closed_at
        by_item = {line.item_code: line for line in self.lines}
        for order, (item_id, entry) in enumerate(session.entries.items(), start=1):
            line = by_item[item_id]
            line.touched = True
            line.touched_order = order
            line.physical_qty = entry.physical_qty
            line.counted_at = entry.counted_at


class CountSessionLineModel(TrackedBase):
    """One baseline item of a count session, with its physical count."""

    __tablename__ = "count_session_lines"

    __table_args__ = (
        UniqueConstraint("session_id", "item_code", name="uq_count_session_line_item"),
        CheckConstraint(
            "physical_qty IS NULL OR physical_qty >= 0",
            name="ck_count_session_line_physical",
        ),
        Index("idx_count_session_line_session", "session_id"),
    )

    session_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("count_sessions.session_id"),
        nullable=False,
    )
    item_code: Mapped[str] = mapped_column(String(64), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    system_qty: Mapped[int] = mapped_column(Integer, nullable=False)
    physical_qty: Mapped[int | None] = mapped_column(Integer, nullable=True)
    counted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    touched: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    touched_order: Mapped[int | None] = mapped_column(Integer, nullable=True)

    session: Mapped["CountSessionModel"] = relationship(
        "CountSessionModel",
        back_populates="lines",
        foreign_keys=[session_id],
        primaryjoin="CountSessionLineModel.session_id == CountSessionModel.session_id",
    )

    def to_entry(self) -> CountEntry:
        return CountEntry(
            item_id=self.item_code,
            system_qty=self.system_qty,
            physical_qty=self.physical_qty,
            counted_at=as_utc(self.counted_at),
        )

    def __repr__(self) -> str:
        return (
            f"<CountSessionLine {self.session_id}/{self.item_code} "
            f"system={self.system_qty} physical={self.physical_qty}>"
        )
