"""
In-memory adapters of the collaborator ports.

``InMemoryCatalogRepository`` and ``InMemoryCountSessionStore`` keep
everything in dicts.  They back the test suite and embedded use where no
database is configured; behaviour matches the SQL adapters (soft-deleted
items hidden, purchases most-recent-first, unknown write targets return
False).
"""

from dataclasses import replace
from datetime import datetime
from typing import Iterable
from uuid import UUID

from inventory_kernel.domain.catalog import (
    CatalogItem,
    CountScope,
    MovementRecord,
    PurchaseRecord,
)
from inventory_kernel.domain.count_session import CountSession
from inventory_kernel.exceptions import CountSessionNotFoundError


class InMemoryCatalogRepository:
    """Catalog repository over plain Python collections."""

    def __init__(
        self,
        items: Iterable[CatalogItem] = (),
        movements: Iterable[MovementRecord] = (),
        purchases: Iterable[PurchaseRecord] = (),
    ):
        self._items: dict[str, CatalogItem] = {item.id: item for item in items}
        self._movements: list[MovementRecord] = list(movements)
        self._purchases: list[PurchaseRecord] = list(purchases)
        self.writes: list[tuple[str, int]] = []

    def list_items(self, scope: CountScope | None = None) -> list[CatalogItem]:
        return [
            item
            for item in self._items.values()
            if not item.is_deleted and (scope is None or scope.includes(item))
        ]

    def list_movements(
        self,
        item_ids: Iterable[str],
        since: datetime,
        until: datetime,
    ) -> list[MovementRecord]:
        wanted = set(item_ids)
        return [
            m
            for m in self._movements
            if m.item_id in wanted and since <= m.timestamp <= until
        ]

    def list_last_purchases(self, item_id: str) -> list[PurchaseRecord]:
        records = [p for p in self._purchases if p.item_id == item_id]
        return sorted(records, key=lambda p: p.purchased_at, reverse=True)

    def write_quantity(self, item_id: str, new_quantity: int) -> bool:
        item = self._items.get(item_id)
        if item is None or item.is_deleted:
            return False
        self._items[item_id] = replace(item, quantity=new_quantity)
        self.writes.append((item_id, new_quantity))
        return True

    def get_item(self, item_id: str) -> CatalogItem | None:
        return self._items.get(item_id)

    def add_item(self, item: CatalogItem) -> CatalogItem:
        self._items[item.id] = item
        return item

    def record_movement(self, movement: MovementRecord) -> MovementRecord:
        self._movements.append(movement)
        return movement

    def record_purchase(self, purchase: PurchaseRecord) -> PurchaseRecord:
        self._purchases.append(purchase)
        return purchase


class InMemoryCountSessionStore:
    """Count session store keeping live entities in a dict."""

    def __init__(self):
        self._sessions: dict[UUID, CountSession] = {}

    def add(self, session: CountSession) -> None:
        self._sessions[session.id] = session

    def get(self, session_id: UUID) -> CountSession | None:
        return self._sessions.get(session_id)

    def save(self, session: CountSession) -> None:
        if session.id not in self._sessions:
            raise CountSessionNotFoundError(str(session.id))
        self._sessions[session.id] = session

    def list_active(self) -> list[CountSession]:
        return [s for s in self._sessions.values() if s.is_active]
