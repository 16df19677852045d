"""
Catalog Domain Models (``inventory_kernel.domain.catalog``).

Responsibility
--------------
Frozen value objects for the nouns the reconciliation engine reads from the
catalog/ledger collaborator: catalog items, entry/exit movements, last
purchase records, count scopes and the indexed stock snapshot built from them.

Architecture
------------
Layer: **Kernel domain** -- pure data structures, no I/O.  The catalog owns
these records; this core never mutates a ``CatalogItem`` directly (quantity
changes go through the collaborator's ``write_quantity``).

Invariants
----------
- ``CatalogItem.quantity >= 0``.
- ``MovementRecord.quantity > 0`` and its timestamp is timezone-aware.
- ``CountScope`` is a tagged variant: CATEGORY carries a category id, ALL
  carries none.

Failure Modes
-------------
- Construction with values violating the invariants raises ``ValueError``
  (programming error at the adapter boundary, not operator input).
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping

from inventory_kernel.logging_config import get_logger

logger = get_logger("domain.catalog")


class ItemKind(str, Enum):
    """Catalog subset an item belongs to. EPI items follow the same rules."""

    PRODUCT = "product"
    EPI = "epi"  # personal protective equipment


class MovementDirection(str, Enum):
    """Direction of a ledger movement."""

    IN = "in"    # entry / receipt
    OUT = "out"  # exit / consumption


@dataclass(frozen=True)
class CatalogItem:
    """
    A catalog item with its current book quantity.

    Contract: Immutable snapshot of the collaborator's record.  Absent or
    zero thresholds are resolved by the indicator engine (min 10, max 1000 by
    default configuration).
    """
    id: str
    name: str
    quantity: int
    min_quantity: int | None = None
    max_quantity: int | None = None
    category_id: str | None = None
    sku: str | None = None
    unit: str = "UN"
    kind: ItemKind = ItemKind.PRODUCT
    supplier_id: str | None = None
    is_deleted: bool = False

    def __post_init__(self):
        if self.quantity < 0:
            logger.warning(
                "catalog_item_negative_quantity",
                extra={"item_id": self.id, "quantity": self.quantity},
            )
            raise ValueError(f"quantity cannot be negative (item {self.id}: {self.quantity})")


@dataclass(frozen=True)
class MovementRecord:
    """
    An entry (IN) or exit (OUT) ledger record.

    Contract: Immutable once created; supplied by the ledger collaborator.
    """
    item_id: str
    quantity: int
    timestamp: datetime
    direction: MovementDirection

    def __post_init__(self):
        if self.quantity <= 0:
            raise ValueError(
                f"movement quantity must be positive (item {self.item_id}: {self.quantity})"
            )
        if self.timestamp.tzinfo is None:
            raise ValueError(f"movement timestamp must be timezone-aware (item {self.item_id})")


@dataclass(frozen=True)
class PurchaseRecord:
    """
    One historical purchase of an item, as used for reference pricing.

    ``unit_price`` may be absent when the entry was recorded without a price.
    """
    item_id: str
    purchased_at: datetime
    quantity: int
    unit_price: Decimal | None = None
    supplier_id: str | None = None
    supplier_name: str | None = None


class CountScopeKind(str, Enum):
    """What a count session covers."""

    ALL = "all"
    CATEGORY = "category"


@dataclass(frozen=True)
class CountScope:
    """
    Scope of a count session: the whole catalog or one category.

    Use ``CountScope.all()`` / ``CountScope.category(cid)`` to build one.
    """
    kind: CountScopeKind
    category_id: str | None = None

    def __post_init__(self):
        if self.kind == CountScopeKind.CATEGORY and not self.category_id:
            raise ValueError("CATEGORY scope requires a category_id")
        if self.kind == CountScopeKind.ALL and self.category_id is not None:
            raise ValueError("ALL scope cannot carry a category_id")

    @classmethod
    def all(cls) -> CountScope:
        return cls(CountScopeKind.ALL)

    @classmethod
    def category(cls, category_id: str) -> CountScope:
        return cls(CountScopeKind.CATEGORY, category_id)

    @property
    def is_all(self) -> bool:
        return self.kind == CountScopeKind.ALL

    def includes(self, item: CatalogItem) -> bool:
        """True if ``item`` belongs to this scope."""
        if self.is_all:
            return True
        return item.category_id == self.category_id

    def overlaps(self, other: CountScope) -> bool:
        """True if both scopes can contain the same item."""
        if self.is_all or other.is_all:
            return True
        return self.category_id == other.category_id

    def __str__(self) -> str:
        if self.is_all:
            return "all"
        return f"category:{self.category_id}"


@dataclass(frozen=True)
class StockSnapshot:
    """
    Read-only view of catalog quantities and movements at one instant.

    Contract: Immutable.  ``items_by_id`` and ``movements_by_item`` are
    indexes built once at construction so that per-item lookups during
    indicator and suggestion passes are O(1).
    """
    items: tuple[CatalogItem, ...]
    movements: tuple[MovementRecord, ...]
    taken_at: datetime
    items_by_id: Mapping[str, CatalogItem] = field(init=False, repr=False, compare=False)
    movements_by_item: Mapping[str, tuple[MovementRecord, ...]] = field(
        init=False, repr=False, compare=False,
    )

    def __post_init__(self):
        object.__setattr__(
            self, "items_by_id", MappingProxyType({item.id: item for item in self.items}),
        )
        grouped: dict[str, list[MovementRecord]] = defaultdict(list)
        for movement in self.movements:
            grouped[movement.item_id].append(movement)
        object.__setattr__(
            self,
            "movements_by_item",
            MappingProxyType({k: tuple(v) for k, v in grouped.items()}),
        )

    @classmethod
    def of(
        cls,
        items: Iterable[CatalogItem],
        movements: Iterable[MovementRecord],
        taken_at: datetime,
    ) -> StockSnapshot:
        return cls(tuple(items), tuple(movements), taken_at)

    def movements_for(self, item_id: str) -> tuple[MovementRecord, ...]:
        return self.movements_by_item.get(item_id, ())
