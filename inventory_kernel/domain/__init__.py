"""
Pure domain layer.

Value objects and the count-session entity, with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Wall-clock time (a Clock is injected)
"""

from inventory_kernel.domain.catalog import (
    CatalogItem,
    CountScope,
    CountScopeKind,
    ItemKind,
    MovementDirection,
    MovementRecord,
    PurchaseRecord,
    StockSnapshot,
)
from inventory_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from inventory_kernel.domain.count_session import (
    COUNT_SESSION_WORKFLOW,
    CountEntry,
    CountProgress,
    CountSession,
    CountSessionStatus,
    CountSummary,
    EntryStatus,
)
from inventory_kernel.domain.ports import CatalogRepository, CountSessionStore
from inventory_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "COUNT_SESSION_WORKFLOW",
    "CatalogItem",
    "CatalogRepository",
    "Clock",
    "CountEntry",
    "CountProgress",
    "CountScope",
    "CountScopeKind",
    "CountSession",
    "CountSessionStatus",
    "CountSessionStore",
    "CountSummary",
    "DeterministicClock",
    "EntryStatus",
    "Guard",
    "ItemKind",
    "MovementDirection",
    "MovementRecord",
    "PurchaseRecord",
    "StockSnapshot",
    "SystemClock",
    "Transition",
    "Workflow",
]
