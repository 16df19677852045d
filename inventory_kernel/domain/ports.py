"""
Collaborator ports (``inventory_kernel.domain.ports``).

Contract:
    CatalogRepository is the catalog/ledger collaborator: read-only snapshot
    queries plus the single-item quantity write used by count adjustments.
    CountSessionStore keeps count sessions across requests and reloads.

Architecture: kernel domain.  Protocols only; adapters live in
``inventory_kernel.services`` (in-memory) and ``inventory_kernel.selectors``
/ ``inventory_kernel.services`` (SQLAlchemy).
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Protocol, runtime_checkable
from uuid import UUID

from inventory_kernel.domain.catalog import (
    CatalogItem,
    CountScope,
    MovementRecord,
    PurchaseRecord,
)
from inventory_kernel.domain.count_session import CountSession


@runtime_checkable
class CatalogRepository(Protocol):
    """Protocol for the catalog and movement-ledger collaborator."""

    def list_items(self, scope: CountScope | None = None) -> list[CatalogItem]:
        """Catalog items in ``scope`` (all when None). Soft-deleted items excluded."""
        ...

    def list_movements(
        self,
        item_ids: Iterable[str],
        since: datetime,
        until: datetime,
    ) -> list[MovementRecord]:
        """Movements of ``item_ids`` with ``since <= timestamp <= until``."""
        ...

    def list_last_purchases(self, item_id: str) -> list[PurchaseRecord]:
        """Purchase history of an item, most-recent-first."""
        ...

    def write_quantity(self, item_id: str, new_quantity: int) -> bool:
        """Overwrite the book quantity of one item. No transaction guarantee."""
        ...


@runtime_checkable
class CountSessionStore(Protocol):
    """Protocol for count session persistence."""

    def add(self, session: CountSession) -> None:
        ...

    def get(self, session_id: UUID) -> CountSession | None:
        ...

    def save(self, session: CountSession) -> None:
        ...

    def list_active(self) -> list[CountSession]:
        ...
