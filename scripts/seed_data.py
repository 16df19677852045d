#!/usr/bin/env python3
"""
Seed the database with a small demo catalog.

Drops all tables, recreates them, and inserts a dozen items across two
categories with 60 days of exits, a few receipts and a purchase history,
so that the stock report shows every status (critical, warning, ok,
excess) and both suggestion kinds.

Usage:
    python3 scripts/seed_data.py [--db-url URL] [--keep]
"""

import argparse
import logging
import os
import sys
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Sequence

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from sqlalchemy.orm import Session

from inventory_kernel.db.engine import create_tables, drop_tables, init_engine_from_url, session_scope
from inventory_kernel.domain.catalog import (
    CatalogItem,
    ItemKind,
    MovementDirection,
    MovementRecord,
    PurchaseRecord,
)
from inventory_kernel.services.catalog_repository import SqlCatalogRepository

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
DB_URL = os.environ.get("DATABASE_URL", "sqlite:///inventory.db")

# id, name, category, kind, quantity, min, max, daily exits
CATALOG = (
    ("P-001", "Hex bolt M8", "fasteners", ItemKind.PRODUCT, 0, 20, 500, 4),
    ("P-002", "Hex nut M8", "fasteners", ItemKind.PRODUCT, 18, 20, 500, 3),
    ("P-003", "Flat washer M8", "fasteners", ItemKind.PRODUCT, 240, 20, 500, 2),
    ("P-004", "Wood screw 4x40", "fasteners", ItemKind.PRODUCT, 900, 50, 800, 1),
    ("P-005", "Anchor 10mm", "fasteners", ItemKind.PRODUCT, 35, None, None, 2),
    ("P-006", "Cable tie 200mm", "electrical", ItemKind.PRODUCT, 60, 30, 1000, 5),
    ("P-007", "Insulating tape", "electrical", ItemKind.PRODUCT, 12, 10, 200, 0),
    ("E-001", "Safety gloves", "ppe", ItemKind.EPI, 4, 10, 200, 1),
    ("E-002", "Safety glasses", "ppe", ItemKind.EPI, 0, 5, 100, 1),
    ("E-003", "Ear plugs (pair)", "ppe", ItemKind.EPI, 300, 50, 1000, 6),
)

PRICES = {
    "P-001": ("0.45", "0.42", "0.48"),
    "P-002": ("0.20", "0.19"),
    "P-006": ("0.08",),
    "E-001": ("12.90", None, "11.50"),
}


def seed(session: Session, now: datetime) -> int:
    """Insert the demo catalog through the catalog repository. Returns items added."""
    repo = SqlCatalogRepository(session)
    for code, name, category, kind, qty, min_qty, max_qty, daily in CATALOG:
        repo.add_item(
            CatalogItem(
                id=code,
                name=name,
                quantity=qty,
                min_quantity=min_qty,
                max_quantity=max_qty,
                category_id=category,
                sku=f"SKU-{code}",
                kind=kind,
                supplier_id="sup-acme" if kind == ItemKind.PRODUCT else "sup-safe",
            ),
            created_by="seed",
        )
        for day in range(1, 61):
            if daily:
                repo.record_movement(
                    MovementRecord(code, daily, now - timedelta(days=day), MovementDirection.OUT)
                )
            if day % 20 == 0:
                repo.record_movement(
                    MovementRecord(code, daily * 20 or 5, now - timedelta(days=day), MovementDirection.IN)
                )

    for code, prices in PRICES.items():
        for n, price in enumerate(prices, start=1):
            repo.record_purchase(
                PurchaseRecord(
                    item_id=code,
                    purchased_at=now - timedelta(days=15 * n),
                    quantity=100,
                    unit_price=Decimal(price) if price is not None else None,
                    supplier_id=f"sup-{n}",
                    supplier_name=f"Supplier {n}",
                )
            )
    return len(CATALOG)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seed a demo inventory catalog")
    parser.add_argument("--db-url", default=DB_URL, help="Database URL")
    parser.add_argument("--keep", action="store_true",
                        help="Do not drop existing tables first")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.disable(logging.CRITICAL)

    try:
        init_engine_from_url(args.db_url, echo=False)
        if not args.keep:
            drop_tables()
        create_tables()
    except Exception as exc:
        print(f"  ERROR: Could not connect: {exc}", file=sys.stderr)
        return 1
    finally:
        logging.disable(logging.NOTSET)

    with session_scope() as db:
        count = seed(db, datetime.now(UTC))

    print(f"  Seeded {count} items into {args.db_url}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
