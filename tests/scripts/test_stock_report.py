"""
Tests for the stock report and seed scripts.

Runs ``main()`` of both scripts against a temporary SQLite file and checks
the report sections, exit codes and the plain-text formatters.
"""

from decimal import Decimal

import pytest

from inventory_engines.indicators import IndicatorSummary, StockIndicator, StockStatus
from inventory_engines.replenishment import ReplenishmentSuggestion, SuggestionKind
from inventory_kernel.db.engine import reset_engine
from scripts import seed_data, stock_report


@pytest.fixture
def db_url(tmp_path):
    yield f"sqlite:///{tmp_path / 'inventory.db'}"
    reset_engine()


def _indicator(item_id, status, days=None, reorder=0):
    return StockIndicator(
        item_id=item_id,
        item_name=f"Item {item_id}",
        current_stock=3,
        min_stock=10,
        max_stock=1000,
        total_consumed=30,
        total_received=0,
        avg_daily_consumption=1.0,
        days_until_stockout=days,
        turnover_rate=10.0,
        status=status,
        reorder_suggestion=reorder,
    )


class TestMain:

    def test_empty_database(self, db_url, capsys):
        assert stock_report.main(["--db-url", db_url, "--create-tables"]) == 0
        out = capsys.readouterr().out
        assert "=== Stock indicators ===" in out
        assert "Items:            0" in out
        assert "No replenishment needed." in out

    def test_seeded_report(self, db_url, capsys):
        assert seed_data.main(["--db-url", db_url]) == 0
        capsys.readouterr()

        assert stock_report.main(["--db-url", db_url, "--period", "30"]) == 0
        out = capsys.readouterr().out

        indicators, rest = out.split("=== Summary ===")
        summary, suggestions = rest.split("=== Replenishment suggestions ===")
        assert "P-001" in indicators
        assert "critical" in indicators
        assert "Critical:         2" in summary
        assert "P-001" in suggestions
        assert "E-002" in suggestions

    def test_kind_filter(self, db_url, capsys):
        seed_data.main(["--db-url", db_url])
        capsys.readouterr()

        stock_report.main(["--db-url", db_url, "--kind", "low"])
        suggestions = capsys.readouterr().out.split("=== Replenishment suggestions ===")[1]
        assert "critical" not in suggestions
        assert "low" in suggestions

    def test_missing_config_file(self, db_url, tmp_path, capsys):
        code = stock_report.main(["--db-url", db_url, "--config", str(tmp_path / "nope.yaml")])
        assert code == 2
        assert "invalid configuration" in capsys.readouterr().err

    def test_invalid_period(self, db_url, capsys):
        code = stock_report.main(["--db-url", db_url, "--create-tables", "--period", "0"])
        assert code == 2
        assert "INVALID_PERIOD" in capsys.readouterr().err


class TestFormatters:

    def test_indicator_table(self):
        text = stock_report.format_indicators(
            [_indicator("A", StockStatus.WARNING, days=3, reorder=42)],
        )
        header, rule, row = text.splitlines()
        assert header.startswith("ITEM")
        assert set(rule) == {"-"}
        assert "warning" in row
        assert row.rstrip().endswith("42")

    def test_unknown_horizon_rendered_as_dash(self):
        text = stock_report.format_indicators([_indicator("A", StockStatus.OK)])
        assert " - " in text.splitlines()[2]

    def test_summary_lists_running_low(self):
        low = _indicator("A", StockStatus.WARNING, days=2)
        summary = IndicatorSummary(
            total_items=1,
            critical_count=0,
            warning_count=1,
            ok_count=0,
            excess_count=0,
            average_turnover=10.0,
            needing_reorder=(),
            running_low=(low,),
        )
        text = stock_report.format_summary(summary)
        assert "Running low:" in text
        assert "A Item A (2 days)" in text

    def test_suggestions(self):
        suggestion = ReplenishmentSuggestion(
            item_id="A",
            kind=SuggestionKind.CRITICAL,
            suggested_quantity=5,
            reference_price=Decimal("1.5"),
            item_name="Item A",
            current_stock=0,
            min_stock=10,
            days_until_stockout=0,
        )
        text = stock_report.format_suggestions([suggestion])
        row = text.splitlines()[2]
        assert row.startswith("critical")
        assert "1.50" in row
        assert row.rstrip().endswith("-")
