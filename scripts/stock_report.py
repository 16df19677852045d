#!/usr/bin/env python3
"""
Print stock health indicators and replenishment suggestions.

Usage:
    python scripts/stock_report.py [--db-url URL] [--period 30]
        [--kind critical|low] [--config policy.yaml] [--create-tables]

Reads DATABASE_URL when --db-url is not given.  Output sections:
  1. Indicator table (one row per catalog item)
  2. Summary (counts per status, average turnover, running-low items)
  3. Replenishment suggestions with reference prices
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from inventory_config import get_active_config
from inventory_engines.indicators import IndicatorSummary, StockIndicator
from inventory_engines.replenishment import ReplenishmentSuggestion
from inventory_kernel.db.engine import create_tables, init_engine_from_url, session_scope
from inventory_kernel.exceptions import InventoryKernelError
from inventory_kernel.logging_config import configure_logging
from inventory_services.stock_service import StockReconciliationService

DB_URL = os.environ.get("DATABASE_URL", "sqlite:///inventory.db")


def format_indicators(indicators: Sequence[StockIndicator]) -> str:
    header = (
        f"{'ITEM':<14} {'NAME':<28} {'STOCK':>7} {'MIN':>6} {'AVG/DAY':>8} "
        f"{'DAYS':>6} {'TURN':>6} {'STATUS':<9} {'REORDER':>8}"
    )
    rows = [header, "-" * len(header)]
    for i in indicators:
        days = "-" if i.days_until_stockout is None else str(i.days_until_stockout)
        rows.append(
            f"{i.item_id:<14.14} {i.item_name:<28.28} {i.current_stock:>7} {i.min_stock:>6} "
            f"{i.avg_daily_consumption:>8.2f} {days:>6} {i.turnover_rate:>6.2f} "
            f"{i.status.value:<9} {i.reorder_suggestion:>8}"
        )
    return "\n".join(rows)


def format_summary(summary: IndicatorSummary) -> str:
    lines = [
        f"Items:            {summary.total_items}",
        f"Critical:         {summary.critical_count}",
        f"Warning:          {summary.warning_count}",
        f"OK:               {summary.ok_count}",
        f"Excess:           {summary.excess_count}",
        f"Average turnover: {summary.average_turnover:.2f}",
        f"Needing reorder:  {len(summary.needing_reorder)}",
    ]
    if summary.running_low:
        lines.append("Running low:")
        lines.extend(
            f"  {i.item_id} {i.item_name} ({i.days_until_stockout} days)"
            for i in summary.running_low
        )
    return "\n".join(lines)


def format_suggestions(suggestions: Sequence[ReplenishmentSuggestion]) -> str:
    if not suggestions:
        return "No replenishment needed."
    header = f"{'KIND':<9} {'ITEM':<14} {'NAME':<28} {'QTY':>6} {'PRICE':>10} {'SUPPLIER':<12}"
    rows = [header, "-" * len(header)]
    for s in suggestions:
        rows.append(
            f"{s.kind.value:<9} {s.item_id:<14.14} {s.item_name:<28.28} "
            f"{s.suggested_quantity:>6} {s.reference_price:>10.2f} "
            f"{s.reference_supplier_id or '-':<12}"
        )
    return "\n".join(rows)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Stock health and replenishment report")
    parser.add_argument("--db-url", default=DB_URL, help="Database URL")
    parser.add_argument("--period", type=int, default=None, help="Analysis window in days")
    parser.add_argument("--kind", choices=("critical", "low"), default=None,
                        help="Only show suggestions of this kind")
    parser.add_argument("--config", type=Path, default=None, help="Policy YAML file")
    parser.add_argument("--create-tables", action="store_true",
                        help="Create missing tables before reading")
    parser.add_argument("--verbose", action="store_true", help="Emit JSON logs to stderr")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        configure_logging(level=logging.DEBUG, stream=sys.stderr)

    try:
        policy = get_active_config(args.config)
    except (FileNotFoundError, ValueError) as exc:
        print(f"  ERROR: invalid configuration: {exc}", file=sys.stderr)
        return 2

    try:
        init_engine_from_url(args.db_url, echo=False)
        if args.create_tables:
            create_tables()
    except Exception as exc:
        print(f"  ERROR: Could not connect: {exc}", file=sys.stderr)
        return 1

    try:
        with session_scope() as db:
            service = StockReconciliationService.for_session(db, policy=policy)
            indicators = service.compute_indicators(args.period)
            summary = service.replenishment.indicator_engine.summarize(indicators=indicators)
            suggestions = service.generate_suggestions(args.period, args.kind)
    except InventoryKernelError as exc:
        print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 2

    print("=== Stock indicators ===")
    print(format_indicators(indicators))
    print()
    print("=== Summary ===")
    print(format_summary(summary))
    print()
    print("=== Replenishment suggestions ===")
    print(format_suggestions(suggestions))
    return 0


if __name__ == "__main__":
    sys.exit(main())
