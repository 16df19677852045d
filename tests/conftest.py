"""
Pytest fixtures for the inventory reconciliation test suite.

Provides:
- Structured logging configuration and a JSON log capture fixture
- A deterministic clock
- In-memory catalog repository and count session store
- An in-memory SQLite session for the SQL adapters
- Small builders for catalog items, movements and purchases
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from inventory_config import get_active_config
from inventory_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from inventory_kernel.domain.catalog import (
    CatalogItem,
    MovementDirection,
    MovementRecord,
    PurchaseRecord,
)
from inventory_kernel.domain.clock import DeterministicClock
from inventory_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from inventory_kernel.services.in_memory import (
    InMemoryCatalogRepository,
    InMemoryCountSessionStore,
)

NOW = datetime(2024, 1, 31, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture inventory_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, count_service):
            count_service.finish(session_id)
            logs = captured_logs()
            assert any(r["message"] == "count_session_finished" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("inventory_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock and policy
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """A clock fixed at 2024-01-31 12:00 UTC."""
    return DeterministicClock(NOW)


@pytest.fixture
def policy():
    return get_active_config()


# =============================================================================
# Builders
# =============================================================================


def make_item(item_id: str, quantity: int, **kwargs) -> CatalogItem:
    kwargs.setdefault("name", f"Item {item_id}")
    return CatalogItem(id=item_id, quantity=quantity, **kwargs)


def exits(item_id: str, total: int, days_ago: int = 1, now: datetime = NOW) -> MovementRecord:
    return MovementRecord(
        item_id=item_id,
        quantity=total,
        timestamp=now - timedelta(days=days_ago),
        direction=MovementDirection.OUT,
    )


def entries(item_id: str, total: int, days_ago: int = 1, now: datetime = NOW) -> MovementRecord:
    return MovementRecord(
        item_id=item_id,
        quantity=total,
        timestamp=now - timedelta(days=days_ago),
        direction=MovementDirection.IN,
    )


def purchase(
    item_id: str,
    days_ago: int,
    unit_price: str | None,
    supplier_id: str | None = "sup-1",
    quantity: int = 10,
) -> PurchaseRecord:
    return PurchaseRecord(
        item_id=item_id,
        purchased_at=NOW - timedelta(days=days_ago),
        quantity=quantity,
        unit_price=Decimal(unit_price) if unit_price is not None else None,
        supplier_id=supplier_id,
    )


# =============================================================================
# In-memory adapters
# =============================================================================


@pytest.fixture
def catalog_repo() -> InMemoryCatalogRepository:
    return InMemoryCatalogRepository()


@pytest.fixture
def session_store() -> InMemoryCountSessionStore:
    return InMemoryCountSessionStore()


# =============================================================================
# SQLite session
# =============================================================================


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """A session on a fresh in-memory SQLite database."""
    init_engine_from_url("sqlite:///:memory:")
    create_tables()
    session = get_session()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        drop_tables()
        reset_engine()
