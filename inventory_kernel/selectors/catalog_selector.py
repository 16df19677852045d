"""
Catalog query selector.

Provides read-only access to catalog items, stock movements, purchase
history and persisted count sessions.

Key design decisions:
- Returns frozen domain values (CatalogItem, MovementRecord, ...), not ORM models
- Uses the caller's Session, never creates its own
- Datetimes are normalized to UTC on the way out (SQLite returns naive values)
"""

from datetime import datetime, timezone
from typing import Iterable
from uuid import UUID

from sqlalchemy import select

from inventory_kernel.domain.catalog import (
    CatalogItem,
    CountScope,
    MovementRecord,
    PurchaseRecord,
)
from inventory_kernel.domain.count_session import CountSession, CountSessionStatus
from inventory_kernel.models.catalog import (
    CatalogItemModel,
    PurchaseHistoryModel,
    StockMovementModel,
)
from inventory_kernel.models.count_session import CountSessionModel
from inventory_kernel.selectors.base import BaseSelector


def _utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc)


class CatalogSelector(BaseSelector[CatalogItemModel]):
    """Selector for catalog and ledger queries."""

    def list_items(self, scope: CountScope | None = None) -> list[CatalogItem]:
        """Non-deleted items in ``scope`` ordered by item code."""
        stmt = select(CatalogItemModel).where(CatalogItemModel.is_deleted.is_(False))
        if scope is not None and not scope.is_all:
            stmt = stmt.where(CatalogItemModel.category_id == scope.category_id)
        stmt = stmt.order_by(CatalogItemModel.item_code)
        return [row.to_dto() for row in self.session.scalars(stmt)]

    def get_item(self, item_id: str) -> CatalogItem | None:
        row = self.item_row(item_id)
        return row.to_dto() if row is not None else None

    def item_row(self, item_id: str) -> CatalogItemModel | None:
        """ORM row of an item, including soft-deleted ones."""
        return self.session.scalars(
            select(CatalogItemModel).where(CatalogItemModel.item_code == item_id)
        ).one_or_none()

    def list_movements(
        self,
        item_ids: Iterable[str],
        since: datetime,
        until: datetime,
    ) -> list[MovementRecord]:
        """Movements of ``item_ids`` with since <= moved_at <= until (both inclusive)."""
        ids = list(item_ids)
        if not ids:
            return []
        stmt = (
            select(StockMovementModel)
            .where(
                StockMovementModel.item_code.in_(ids),
                StockMovementModel.moved_at >= _utc(since),
                StockMovementModel.moved_at <= _utc(until),
            )
            .order_by(StockMovementModel.moved_at, StockMovementModel.item_code)
        )
        return [row.to_dto() for row in self.session.scalars(stmt)]

    def list_last_purchases(self, item_id: str, limit: int | None = None) -> list[PurchaseRecord]:
        """Purchase history of an item, most-recent-first."""
        stmt = (
            select(PurchaseHistoryModel)
            .where(PurchaseHistoryModel.item_code == item_id)
            .order_by(PurchaseHistoryModel.purchased_at.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return [row.to_dto() for row in self.session.scalars(stmt)]


class CountSessionSelector(BaseSelector[CountSessionModel]):
    """Selector for persisted count sessions."""

    def get(self, session_id: UUID) -> CountSession | None:
        row = self.session_row(session_id)
        return row.to_domain() if row is not None else None

    def session_row(self, session_id: UUID) -> CountSessionModel | None:
        return self.session.scalars(
            select(CountSessionModel).where(CountSessionModel.session_id == session_id)
        ).one_or_none()

    def list_active(self) -> list[CountSession]:
        stmt = (
            select(CountSessionModel)
            .where(CountSessionModel.status == CountSessionStatus.ACTIVE.value)
            .order_by(CountSessionModel.started_at)
        )
        return [row.to_domain() for row in self.session.scalars(stmt)]
