"""
Module: inventory_kernel.models.catalog
Responsibility: ORM persistence for the catalog/ledger side: catalog items,
    entry/exit stock movements and the purchase history used for reference
    pricing.
Architecture position: Kernel > Models.  May import from db/base.py and the
    pure domain value objects (for DTO conversion).  MUST NOT import from
    services/ or selectors/.

Invariants enforced:
    - item_code is the business identifier of an item and is unique.
    - quantity >= 0 (check constraint); movements carry quantity > 0.
    - direction is one of 'in' / 'out'.

Failure modes:
    - IntegrityError on duplicate item_code (uq_catalog_item_code).
    - IntegrityError on negative quantities (check constraints).
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import TrackedBase
from inventory_kernel.domain.catalog import (
    CatalogItem,
    ItemKind,
    MovementDirection,
    MovementRecord,
    PurchaseRecord,
)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read).

    Rows are always written in UTC, so a naive value read back is UTC.
    """
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class CatalogItemModel(TrackedBase):
    """
    A catalog item with its current book quantity.

    Contract:
        The catalog owns this row.  The reconciliation core only rewrites
        ``quantity`` through the catalog repository's write_quantity.
    """

    __tablename__ = "catalog_items"

    __table_args__ = (
        UniqueConstraint("item_code", name="uq_catalog_item_code"),
        CheckConstraint("quantity >= 0", name="ck_catalog_item_quantity"),
        Index("idx_catalog_item_category", "category_id"),
        Index("idx_catalog_item_kind", "kind"),
    )

    item_code: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sku: Mapped[str | None] = mapped_column(String(64), nullable=True)
    unit: Mapped[str] = mapped_column(String(16), nullable=False, default="UN")
    kind: Mapped[str] = mapped_column(String(20), nullable=False, default=ItemKind.PRODUCT.value)
    category_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    supplier_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Null or zero thresholds fall back to the configured defaults
    min_quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)

    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def to_dto(self) -> CatalogItem:
        """Convert ORM model to frozen domain value object."""
        return CatalogItem(
            id=self.item_code,
            name=self.name,
            quantity=self.quantity,
            min_quantity=self.min_quantity,
            max_quantity=self.max_quantity,
            category_id=self.category_id,
            sku=self.sku,
            unit=self.unit,
            kind=ItemKind(self.kind),
            supplier_id=self.supplier_id,
            is_deleted=self.is_deleted,
        )

    @classmethod
    def from_dto(cls, dto: CatalogItem) -> CatalogItemModel:
        """Create ORM model from domain value object."""
        return cls(
            item_code=dto.id,
            name=dto.name,
            quantity=dto.quantity,
            min_quantity=dto.min_quantity,
            max_quantity=dto.max_quantity,
            category_id=dto.category_id,
            sku=dto.sku,
            unit=dto.unit,
            kind=dto.kind.value,
            supplier_id=dto.supplier_id,
            is_deleted=dto.is_deleted,
        )

    def __repr__(self) -> str:
        return f"<CatalogItem {self.item_code}: {self.name} qty={self.quantity}>"


class StockMovementModel(TrackedBase):
    """An entry (in) or exit (out) ledger record.  Append-only."""

    __tablename__ = "stock_movements"

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_movement_quantity"),
        CheckConstraint("direction IN ('in', 'out')", name="ck_stock_movement_direction"),
        Index("idx_stock_movement_item_time", "item_code", "moved_at"),
    )

    item_code: Mapped[str] = mapped_column(String(64), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    direction: Mapped[str] = mapped_column(String(3), nullable=False)
    moved_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def to_dto(self) -> MovementRecord:
        return MovementRecord(
            item_id=self.item_code,
            quantity=self.quantity,
            timestamp=as_utc(self.moved_at),
            direction=MovementDirection(self.direction),
        )

    @classmethod
    def from_dto(cls, dto: MovementRecord) -> StockMovementModel:
        return cls(
            item_code=dto.item_id,
            quantity=dto.quantity,
            direction=dto.direction.value,
            moved_at=dto.timestamp.astimezone(timezone.utc),
        )

    def __repr__(self) -> str:
        return f"<StockMovement {self.item_code} {self.direction} {self.quantity}>"


class PurchaseHistoryModel(TrackedBase):
    """One historical purchase of an item."""

    __tablename__ = "purchase_history"

    __table_args__ = (
        Index("idx_purchase_history_item_time", "item_code", "purchased_at"),
    )

    item_code: Mapped[str] = mapped_column(String(64), nullable=False)
    purchased_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal | None] = mapped_column(nullable=True)
    supplier_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    supplier_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def to_dto(self) -> PurchaseRecord:
        return PurchaseRecord(
            item_id=self.item_code,
            purchased_at=as_utc(self.purchased_at),
            quantity=self.quantity,
            unit_price=self.unit_price,
            supplier_id=self.supplier_id,
            supplier_name=self.supplier_name,
        )

    @classmethod
    def from_dto(cls, dto: PurchaseRecord) -> PurchaseHistoryModel:
        return cls(
            item_code=dto.item_id,
            purchased_at=as_utc(dto.purchased_at).astimezone(timezone.utc),
            quantity=dto.quantity,
            unit_price=dto.unit_price,
            supplier_id=dto.supplier_id,
            supplier_name=dto.supplier_name,
        )
