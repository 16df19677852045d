"""
Module: inventory_engines.indicators
Responsibility:
    Compute consumption-based stock health indicators for every catalog
    item of a snapshot: average daily consumption, days until stockout,
    turnover, status classification and a reorder suggestion.  Also
    summarizes a batch of indicators for dashboard cards.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import inventory_kernel domain values, exceptions and logging.

Invariants enforced:
    - Purity: ``now`` is passed in; the engine never reads the wall clock.
    - Exact arithmetic: averages, stockout days and reorder quantities are
      computed with ``fractions.Fraction`` so ceil/floor never suffer from
      binary float error.  Only the reported averages are rounded (2 dp).
    - One indicator per non-deleted item, in snapshot (catalog) order.
    - ``reorder_suggestion >= 0``.

Failure modes:
    - InvalidPeriodError when ``period_days`` is not a positive int.

Usage:
    from inventory_engines.indicators import StockIndicatorEngine

    engine = StockIndicatorEngine()
    indicators = engine.compute(snapshot=snapshot, period_days=30, now=clock.now())
    summary = engine.summarize(indicators=indicators)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from enum import Enum
from fractions import Fraction
from typing import Sequence

from inventory_kernel.domain.catalog import (
    CatalogItem,
    ItemKind,
    MovementDirection,
    StockSnapshot,
)
from inventory_kernel.exceptions import InvalidPeriodError
from inventory_kernel.logging_config import get_logger
from inventory_engines.tracer import traced_engine

logger = get_logger("engines.indicators")


class StockStatus(str, Enum):
    """Health classification of an item's current stock."""

    CRITICAL = "critical"  # out of stock
    WARNING = "warning"    # at or below minimum
    OK = "ok"
    EXCESS = "excess"      # at or above maximum


@dataclass(frozen=True)
class IndicatorParameters:
    """
    Tunables of the indicator computation.

    Built by the service layer from the active configuration.
    """
    default_min_quantity: int = 10
    default_max_quantity: int = 1000
    safety_days: int = 15
    coverage_days: int = 30
    running_low_days: int = 7

    def __post_init__(self):
        for name in ("default_min_quantity", "default_max_quantity", "safety_days", "coverage_days"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")
        if self.running_low_days < 0:
            raise ValueError("running_low_days cannot be negative")


@dataclass(frozen=True)
class StockIndicator:
    """Health metrics of one item over the analysis window."""
    item_id: str
    item_name: str
    current_stock: int
    min_stock: int
    max_stock: int
    total_consumed: int
    total_received: int
    avg_daily_consumption: float
    days_until_stockout: int | None
    turnover_rate: float
    status: StockStatus
    reorder_suggestion: int
    sku: str | None = None
    unit: str = "UN"
    item_kind: ItemKind = ItemKind.PRODUCT
    category_id: str | None = None
    supplier_id: str | None = None

    @property
    def needs_reorder(self) -> bool:
        return self.reorder_suggestion > 0


@dataclass(frozen=True)
class IndicatorSummary:
    """Dashboard roll-up of a batch of indicators."""
    total_items: int
    critical_count: int
    warning_count: int
    ok_count: int
    excess_count: int
    average_turnover: float
    needing_reorder: tuple[StockIndicator, ...]
    running_low: tuple[StockIndicator, ...]


def analysis_window(now: datetime, period_days: int) -> tuple[datetime, datetime]:
    """
    Inclusive window ``[start_of_day(now - period_days), end_of_day(now)]``.

    Day boundaries are taken in ``now``'s timezone.
    """
    start = datetime.combine((now - timedelta(days=period_days)).date(), time.min, now.tzinfo)
    end = datetime.combine(now.date(), time.max, now.tzinfo)
    return start, end


def validate_period(period_days: object) -> int:
    """Return ``period_days`` if it is a positive int, else raise InvalidPeriodError."""
    if isinstance(period_days, bool) or not isinstance(period_days, int) or period_days <= 0:
        raise InvalidPeriodError(period_days)
    return period_days


def _threshold(value: int | None, default: int) -> int:
    # Zero, negative or missing thresholds mean "not set"
    return value if value is not None and value > 0 else default


def _round2(value: Fraction) -> float:
    return round(float(value), 2)


class StockIndicatorEngine:
    """
    Pure indicator calculator.

    Contract:
        ``compute`` maps a StockSnapshot to one StockIndicator per item.
        Thresholds that are missing or not positive fall back to the
        parameter defaults.
    Non-goals:
        - Does not fetch data; callers build the snapshot.
        - Does not price anything (see ReplenishmentSuggestionAggregator).
    """

    def __init__(self, parameters: IndicatorParameters | None = None):
        self.parameters = parameters or IndicatorParameters()

    def classify(self, quantity: int, min_stock: int, max_stock: int) -> StockStatus:
        """Status by precedence: zero, then minimum, then maximum."""
        if quantity == 0:
            return StockStatus.CRITICAL
        if quantity <= min_stock:
            return StockStatus.WARNING
        if quantity >= max_stock:
            return StockStatus.EXCESS
        return StockStatus.OK

    def reorder_quantity(self, current: int, min_stock: int, avg: Fraction) -> int:
        """
        Units to buy to cover ``coverage_days`` plus the safety stock.

        Zero unless current stock is below ``min + avg * safety_days``.
        """
        safety = avg * self.parameters.safety_days
        reorder_point = min_stock + safety
        if current >= reorder_point:
            return 0
        needed = avg * self.parameters.coverage_days + safety - current
        return max(0, math.ceil(needed))

    def indicator_for(
        self,
        item: CatalogItem,
        snapshot: StockSnapshot,
        period_days: int,
        window: tuple[datetime, datetime],
    ) -> StockIndicator:
        since, until = window
        consumed = 0
        received = 0
        for movement in snapshot.movements_for(item.id):
            if not since <= movement.timestamp <= until:
                continue
            if movement.direction == MovementDirection.OUT:
                consumed += movement.quantity
            else:
                received += movement.quantity

        min_stock = _threshold(item.min_quantity, self.parameters.default_min_quantity)
        max_stock = _threshold(item.max_quantity, self.parameters.default_max_quantity)
        current = item.quantity
        avg = Fraction(consumed, period_days)

        days_until_stockout = math.floor(Fraction(current) / avg) if avg > 0 else None
        # Approximation kept from the dashboard: zero stock divides by 1
        turnover = Fraction(consumed, max(current, 1))

        return StockIndicator(
            item_id=item.id,
            item_name=item.name,
            current_stock=current,
            min_stock=min_stock,
            max_stock=max_stock,
            total_consumed=consumed,
            total_received=received,
            avg_daily_consumption=_round2(avg),
            days_until_stockout=days_until_stockout,
            turnover_rate=_round2(turnover),
            status=self.classify(current, min_stock, max_stock),
            reorder_suggestion=self.reorder_quantity(current, min_stock, avg),
            sku=item.sku,
            unit=item.unit,
            item_kind=item.kind,
            category_id=item.category_id,
            supplier_id=item.supplier_id,
        )

    @traced_engine("indicators", "1.0", fingerprint_fields=("period_days", "now"))
    def compute(
        self,
        snapshot: StockSnapshot,
        period_days: int,
        now: datetime,
    ) -> list[StockIndicator]:
        """
        Compute one indicator per non-deleted item of ``snapshot``.

        Args:
            snapshot: Items and movements to analyse.
            period_days: Length of the analysis window in days (> 0).
            now: Current instant, from the caller's Clock.

        Raises:
            InvalidPeriodError: period_days is not a positive int.
        """
        validate_period(period_days)
        window = analysis_window(now, period_days)

        indicators = [
            self.indicator_for(item, snapshot, period_days, window)
            for item in snapshot.items
            if not item.is_deleted
        ]

        logger.info(
            "indicators_computed",
            extra={
                "period_days": period_days,
                "window_start": window[0].isoformat(),
                "window_end": window[1].isoformat(),
                "item_count": len(indicators),
                "critical_count": sum(1 for i in indicators if i.status == StockStatus.CRITICAL),
            },
        )
        return indicators

    @traced_engine("indicator_summary", "1.0")
    def summarize(self, indicators: Sequence[StockIndicator]) -> IndicatorSummary:
        """Counts per status, average turnover, reorder and running-low lists."""
        counts = {status: 0 for status in StockStatus}
        for indicator in indicators:
            counts[indicator.status] += 1

        average_turnover = (
            round(sum(i.turnover_rate for i in indicators) / len(indicators), 2)
            if indicators
            else 0.0
        )
        running_low = sorted(
            (
                i
                for i in indicators
                if i.days_until_stockout is not None
                and i.days_until_stockout <= self.parameters.running_low_days
            ),
            key=lambda i: i.days_until_stockout,
        )

        return IndicatorSummary(
            total_items=len(indicators),
            critical_count=counts[StockStatus.CRITICAL],
            warning_count=counts[StockStatus.WARNING],
            ok_count=counts[StockStatus.OK],
            excess_count=counts[StockStatus.EXCESS],
            average_turnover=average_turnover,
            needing_reorder=tuple(i for i in indicators if i.needs_reorder),
            running_low=tuple(running_low),
        )
