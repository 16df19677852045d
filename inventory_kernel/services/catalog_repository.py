"""
SqlCatalogRepository -- SQLAlchemy adapter of the catalog collaborator port.

Responsibility:
    Implements ``CatalogRepository`` over the ``catalog_items``,
    ``stock_movements`` and ``purchase_history`` tables.  Reads are
    delegated to ``CatalogSelector``; the only catalog write the
    reconciliation core performs is ``write_quantity``.  The seeding
    helpers (``add_item``, ``record_movement``, ``record_purchase``) stand
    in for the catalog's own CRUD surface in tests and the CLI.

Invariants enforced:
    - Flush-only: never commits; the caller's ``session_scope()`` decides.
    - ``write_quantity`` returns False (never raises) for an unknown or
      soft-deleted item, so the applier records it as a failed write.
    - Each ``write_quantity`` runs in its own SAVEPOINT; a failed write
      (constraint, trigger, lock) is rolled back alone and re-raised, and
      the outer transaction stays usable.
"""

from datetime import datetime
from typing import Iterable

from sqlalchemy.orm import Session

from inventory_kernel.domain.catalog import (
    CatalogItem,
    CountScope,
    MovementRecord,
    PurchaseRecord,
)
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.catalog import (
    CatalogItemModel,
    PurchaseHistoryModel,
    StockMovementModel,
)
from inventory_kernel.selectors.catalog_selector import CatalogSelector
from inventory_kernel.services.base import BaseService

logger = get_logger("services.catalog_repository")


class SqlCatalogRepository(BaseService[CatalogItemModel]):
    """Catalog repository backed by the caller's SQLAlchemy session."""

    def __init__(self, session: Session):
        super().__init__(session)
        self._selector = CatalogSelector(session)

    # -- read side --------------------------------------------------------

    def list_items(self, scope: CountScope | None = None) -> list[CatalogItem]:
        return self._selector.list_items(scope)

    def list_movements(
        self,
        item_ids: Iterable[str],
        since: datetime,
        until: datetime,
    ) -> list[MovementRecord]:
        return self._selector.list_movements(item_ids, since, until)

    def list_last_purchases(self, item_id: str) -> list[PurchaseRecord]:
        return self._selector.list_last_purchases(item_id)

    def get_item(self, item_id: str) -> CatalogItem | None:
        return self._selector.get_item(item_id)

    # -- write side -------------------------------------------------------

    def write_quantity(self, item_id: str, new_quantity: int) -> bool:
        # Per-item SAVEPOINT: a failed flush rolls back this write only
        with self.session.begin_nested():
            row = self._selector.item_row(item_id)
            if row is None or row.is_deleted:
                logger.warning(
                    "catalog_write_target_missing",
                    extra={"item_id": item_id, "new_quantity": new_quantity},
                )
                return False
            previous = row.quantity
            row.quantity = new_quantity
            self.session.flush()
        logger.info(
            "catalog_quantity_written",
            extra={
                "item_id": item_id,
                "previous_quantity": previous,
                "new_quantity": new_quantity,
            },
        )
        return True

    def add_item(self, item: CatalogItem, created_by: str = "system") -> CatalogItem:
        model = CatalogItemModel.from_dto(item)
        model.created_by = created_by
        self.session.add(model)
        self.session.flush()
        return item

    def record_movement(self, movement: MovementRecord) -> MovementRecord:
        self.session.add(StockMovementModel.from_dto(movement))
        self.session.flush()
        return movement

    def record_purchase(self, purchase: PurchaseRecord) -> PurchaseRecord:
        self.session.add(PurchaseHistoryModel.from_dto(purchase))
        self.session.flush()
        return purchase
