"""Kernel adapters: SQL-backed and in-memory implementations of the ports."""

from inventory_kernel.services.catalog_repository import SqlCatalogRepository
from inventory_kernel.services.count_session_store import SqlCountSessionStore
from inventory_kernel.services.in_memory import (
    InMemoryCatalogRepository,
    InMemoryCountSessionStore,
)

__all__ = [
    "InMemoryCatalogRepository",
    "InMemoryCountSessionStore",
    "SqlCatalogRepository",
    "SqlCountSessionStore",
]
