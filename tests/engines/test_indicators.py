"""
Tests for the stock indicator engine.

Covers:
- Consumption averages, stockout horizon and turnover
- Status precedence (critical > warning > excess > ok)
- Reorder quantity formula
- Analysis window boundaries
- Threshold defaults for missing and zero thresholds
- Period validation
- Summary roll-up
"""

from datetime import datetime, timedelta, timezone
from fractions import Fraction

import pytest

from inventory_engines.indicators import (
    IndicatorParameters,
    StockIndicatorEngine,
    StockStatus,
    analysis_window,
    validate_period,
)
from inventory_kernel.domain.catalog import MovementDirection, MovementRecord, StockSnapshot
from inventory_kernel.exceptions import InvalidPeriodError
from tests.conftest import NOW, entries, exits, make_item


def compute(items, movements=(), period_days=30, engine=None):
    engine = engine or StockIndicatorEngine()
    snapshot = StockSnapshot.of(items, movements, NOW)
    return engine.compute(snapshot=snapshot, period_days=period_days, now=NOW)


def single(item, movements=(), period_days=30, engine=None):
    (indicator,) = compute([item], movements, period_days, engine)
    return indicator


class TestIndicatorScenarios:
    """The canonical dashboard cases."""

    def test_out_of_stock_item_is_critical(self):
        indicator = single(make_item("A", 0), [exits("A", 10)])

        assert indicator.status == StockStatus.CRITICAL
        assert indicator.avg_daily_consumption == 0.33
        assert indicator.days_until_stockout == 0
        assert indicator.reorder_suggestion == 15

    def test_idle_item_is_ok_without_horizon(self):
        indicator = single(make_item("B", 100, min_quantity=10))

        assert indicator.status == StockStatus.OK
        assert indicator.days_until_stockout is None
        assert indicator.reorder_suggestion == 0
        assert indicator.avg_daily_consumption == 0.0
        assert indicator.turnover_rate == 0.0

    def test_reorder_covers_period_plus_safety(self):
        indicator = single(make_item("E", 8, min_quantity=10), [exits("E", 60)])

        assert indicator.avg_daily_consumption == 2.0
        assert indicator.status == StockStatus.WARNING
        assert indicator.days_until_stockout == 4
        assert indicator.reorder_suggestion == 82


class TestConsumption:

    def test_only_exits_count_as_consumption(self):
        indicator = single(
            make_item("A", 20),
            [exits("A", 6), entries("A", 50), exits("A", 3, days_ago=5)],
        )
        assert indicator.total_consumed == 9
        assert indicator.total_received == 50
        assert indicator.avg_daily_consumption == 0.3

    def test_days_until_stockout_floors(self):
        # avg = 7/3 per day, 10 / (7/3) = 4.28...
        indicator = single(make_item("A", 10), [exits("A", 7)], period_days=3)
        assert indicator.days_until_stockout == 4

    def test_turnover_uses_current_stock(self):
        indicator = single(make_item("A", 40), [exits("A", 10)])
        assert indicator.turnover_rate == 0.25

    def test_turnover_with_zero_stock_divides_by_one(self):
        indicator = single(make_item("A", 0), [exits("A", 12)])
        assert indicator.turnover_rate == 12.0

    def test_movements_of_other_items_ignored(self):
        indicator = single(make_item("A", 40), [exits("B", 10)])
        assert indicator.total_consumed == 0


class TestAnalysisWindow:

    def test_window_bounds(self):
        start, end = analysis_window(NOW, 30)
        assert start == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert end == datetime(2024, 1, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)

    def test_start_of_first_day_included(self):
        at_start = MovementRecord(
            "A", 5, datetime(2024, 1, 1, tzinfo=timezone.utc), MovementDirection.OUT,
        )
        indicator = single(make_item("A", 50), [at_start])
        assert indicator.total_consumed == 5

    def test_day_before_window_excluded(self):
        before = MovementRecord(
            "A", 5, datetime(2023, 12, 31, 23, 59, 59, tzinfo=timezone.utc), MovementDirection.OUT,
        )
        indicator = single(make_item("A", 50), [before])
        assert indicator.total_consumed == 0

    def test_later_today_included(self):
        tonight = MovementRecord("A", 5, NOW + timedelta(hours=11), MovementDirection.OUT)
        indicator = single(make_item("A", 50), [tonight])
        assert indicator.total_consumed == 5

    def test_tomorrow_excluded(self):
        tomorrow = MovementRecord("A", 5, NOW + timedelta(days=1), MovementDirection.OUT)
        indicator = single(make_item("A", 50), [tomorrow])
        assert indicator.total_consumed == 0

    def test_window_uses_now_timezone(self):
        local = timezone(timedelta(hours=-3))
        now = datetime(2024, 1, 31, 1, 0, tzinfo=local)
        start, end = analysis_window(now, 1)
        assert start == datetime(2024, 1, 30, tzinfo=local)
        assert end.date() == now.date()


class TestClassification:

    def setup_method(self):
        self.engine = StockIndicatorEngine()

    @pytest.mark.parametrize(
        "quantity,min_stock,max_stock,expected",
        [
            (0, 10, 1000, StockStatus.CRITICAL),
            (0, 0, 0, StockStatus.CRITICAL),
            (10, 10, 1000, StockStatus.WARNING),
            (11, 10, 1000, StockStatus.OK),
            (1000, 10, 1000, StockStatus.EXCESS),
            (5, 10, 5, StockStatus.WARNING),
        ],
    )
    def test_precedence(self, quantity, min_stock, max_stock, expected):
        assert self.engine.classify(quantity, min_stock, max_stock) == expected

    def test_absent_thresholds_use_defaults(self):
        indicator = single(make_item("A", 10))
        assert indicator.min_stock == 10
        assert indicator.max_stock == 1000
        assert indicator.status == StockStatus.WARNING

    def test_zero_thresholds_use_defaults(self):
        indicator = single(make_item("A", 5, min_quantity=0, max_quantity=0))
        assert indicator.min_stock == 10
        assert indicator.max_stock == 1000
        assert indicator.status == StockStatus.WARNING

    def test_zero_maximum_never_reports_excess(self):
        indicator = single(make_item("A", 500, min_quantity=20, max_quantity=0))
        assert indicator.min_stock == 20
        assert indicator.max_stock == 1000
        assert indicator.status == StockStatus.OK

    def test_explicit_thresholds_are_kept(self):
        indicator = single(make_item("A", 5, min_quantity=3, max_quantity=50))
        assert indicator.min_stock == 3
        assert indicator.max_stock == 50
        assert indicator.status == StockStatus.OK

    def test_custom_parameters(self):
        engine = StockIndicatorEngine(
            IndicatorParameters(default_min_quantity=2, default_max_quantity=20),
        )
        indicator = single(make_item("A", 20), engine=engine)
        assert indicator.status == StockStatus.EXCESS


class TestReorderQuantity:

    def setup_method(self):
        self.engine = StockIndicatorEngine()

    def test_above_reorder_point_is_zero(self):
        # point = 10 + 1 * 15 = 25
        assert self.engine.reorder_quantity(25, 10, Fraction(1)) == 0

    def test_just_below_reorder_point(self):
        # 1 * 30 + 15 - 24 = 21
        assert self.engine.reorder_quantity(24, 10, Fraction(1)) == 21

    def test_no_consumption_below_minimum(self):
        # point = 10 > 3, need = 0 + 0 - 3 < 0
        assert self.engine.reorder_quantity(3, 10, Fraction(0)) == 0

    def test_rounds_up(self):
        # avg 1/3: 10 + 5 - 0 = 15 exactly; avg 1/7: 30/7 + 15/7 = 6.43 -> 7
        assert self.engine.reorder_quantity(0, 10, Fraction(1, 3)) == 15
        assert self.engine.reorder_quantity(0, 10, Fraction(1, 7)) == 7

    def test_needs_reorder_flag(self):
        indicator = single(make_item("A", 8, min_quantity=10), [exits("A", 60)])
        assert indicator.needs_reorder


class TestComputeContract:

    def test_one_indicator_per_live_item_in_order(self):
        items = [make_item("C", 1), make_item("A", 2), make_item("X", 3, is_deleted=True)]
        indicators = compute(items)
        assert [i.item_id for i in indicators] == ["C", "A"]

    def test_item_metadata_carried(self):
        item = make_item("A", 3, sku="SKU-1", unit="KG", category_id="c1", supplier_id="s1")
        indicator = single(item)
        assert indicator.sku == "SKU-1"
        assert indicator.unit == "KG"
        assert indicator.category_id == "c1"
        assert indicator.supplier_id == "s1"

    @pytest.mark.parametrize("period", [0, -1, True, 1.5, "30", None])
    def test_invalid_period_rejected(self, period):
        with pytest.raises(InvalidPeriodError):
            compute([make_item("A", 1)], period_days=period)

    def test_validate_period_passthrough(self):
        assert validate_period(7) == 7

    def test_compute_logs(self, captured_logs):
        compute([make_item("A", 0)])
        logs = captured_logs()
        computed = [r for r in logs if r["message"] == "indicators_computed"]
        assert computed[0]["item_count"] == 1
        assert computed[0]["critical_count"] == 1


class TestSummary:

    def setup_method(self):
        self.engine = StockIndicatorEngine()

    def test_counts_and_lists(self):
        items = [
            make_item("crit", 0),
            make_item("warn", 8, min_quantity=10),
            make_item("ok", 100),
            make_item("excess", 2000),
            make_item("soon", 20),
        ]
        movements = [
            exits("crit", 30),
            exits("warn", 60),
            exits("soon", 90),
            exits("ok", 30),
        ]
        indicators = compute(items, movements, engine=self.engine)
        summary = self.engine.summarize(indicators=indicators)

        assert summary.total_items == 5
        assert summary.critical_count == 1
        assert summary.warning_count == 1
        assert summary.ok_count == 2
        assert summary.excess_count == 1
        # crit: 0 days, warn: 8 / 2 = 4 days, soon: 20 / 3 = 6 days
        assert [i.item_id for i in summary.running_low] == ["crit", "warn", "soon"]
        assert {i.item_id for i in summary.needing_reorder} == {"crit", "warn", "soon"}

    def test_average_turnover(self):
        indicators = compute(
            [make_item("A", 40), make_item("B", 20)],
            [exits("A", 10), exits("B", 15)],
        )
        # 0.25 and 0.75
        assert self.engine.summarize(indicators=indicators).average_turnover == 0.5

    def test_empty_summary(self):
        summary = self.engine.summarize(indicators=[])
        assert summary.total_items == 0
        assert summary.average_turnover == 0.0
        assert summary.running_low == ()
