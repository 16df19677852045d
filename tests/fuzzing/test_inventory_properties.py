"""
Property-based tests for the reconciliation and replenishment rules.

Boundaries fuzzed here:
- Indicators: arbitrary stock, thresholds, consumption and window length
- Count sessions: arbitrary count sequences, recounts, cancel
- Purchase orders: arbitrary selections and prices
"""

from datetime import timedelta
from decimal import Decimal
from fractions import Fraction

from hypothesis import given, settings
from hypothesis import strategies as st

from inventory_engines.indicators import StockIndicatorEngine, StockStatus
from inventory_engines.purchase_order import PurchaseOrderDraftBuilder
from inventory_engines.replenishment import ReplenishmentSuggestion, SuggestionKind
from inventory_kernel.domain.catalog import CountScope, MovementDirection, MovementRecord, StockSnapshot
from inventory_kernel.domain.clock import DeterministicClock
from inventory_kernel.domain.count_session import CountSession, EntryStatus
from inventory_kernel.services.in_memory import (
    InMemoryCatalogRepository,
    InMemoryCountSessionStore,
)
from inventory_services.count_service import CountSessionService
from tests.conftest import NOW, make_item

quantities = st.integers(min_value=0, max_value=10_000)
thresholds = st.one_of(st.none(), st.integers(min_value=0, max_value=5_000))
periods = st.integers(min_value=1, max_value=120)


@st.composite
def item_with_exits(draw):
    period = draw(periods)
    item = make_item(
        "X",
        draw(quantities),
        min_quantity=draw(thresholds),
        max_quantity=draw(thresholds),
    )
    exit_sizes = draw(st.lists(st.integers(min_value=1, max_value=500), max_size=8))
    movements = [
        MovementRecord(
            "X",
            size,
            NOW - timedelta(days=draw(st.integers(min_value=0, max_value=period - 1))),
            MovementDirection.OUT,
        )
        for size in exit_sizes
    ]
    return item, movements, period


def _indicator(item, movements, period):
    snapshot = StockSnapshot.of([item], movements, NOW)
    (indicator,) = StockIndicatorEngine().compute(snapshot=snapshot, period_days=period, now=NOW)
    return indicator


class TestIndicatorProperties:

    @given(case=item_with_exits())
    @settings(max_examples=200, deadline=None)
    def test_horizon_present_iff_consumption(self, case):
        item, movements, period = case
        indicator = _indicator(item, movements, period)

        assert indicator.total_consumed == sum(m.quantity for m in movements)
        assert (indicator.days_until_stockout is not None) == (indicator.total_consumed > 0)
        if indicator.days_until_stockout is not None:
            assert indicator.days_until_stockout >= 0

    @given(case=item_with_exits())
    @settings(max_examples=200, deadline=None)
    def test_reorder_only_below_reorder_point(self, case):
        item, movements, period = case
        indicator = _indicator(item, movements, period)

        assert indicator.reorder_suggestion >= 0
        if indicator.reorder_suggestion > 0:
            avg = Fraction(indicator.total_consumed, period)
            assert indicator.current_stock < indicator.min_stock + avg * 15

    @given(case=item_with_exits())
    @settings(max_examples=200, deadline=None)
    def test_status_precedence(self, case):
        item, movements, period = case
        indicator = _indicator(item, movements, period)

        if indicator.current_stock == 0:
            assert indicator.status == StockStatus.CRITICAL
        elif indicator.current_stock <= indicator.min_stock:
            assert indicator.status == StockStatus.WARNING
        elif indicator.current_stock >= indicator.max_stock:
            assert indicator.status == StockStatus.EXCESS
        else:
            assert indicator.status == StockStatus.OK


class TestCountProperties:

    @given(system=quantities, counts=st.lists(quantities, min_size=1, max_size=6))
    @settings(max_examples=200, deadline=None)
    def test_recount_keeps_single_entry_last_value(self, system, counts):
        clock = DeterministicClock(NOW)
        session = CountSession.start(CountScope.all(), "Fuzz", [make_item("X", system)], clock)
        for value in counts:
            session.record_count("X", value, clock)

        assert len(session.entries) == 1
        entry = session.entry("X")
        assert entry.physical_qty == counts[-1]
        assert entry.difference == counts[-1] - system
        expected = EntryStatus.OK if counts[-1] == system else EntryStatus.DIVERGENT
        assert entry.entry_status == expected

    @given(
        stock=st.lists(quantities, min_size=1, max_size=6),
        data=st.data(),
    )
    @settings(max_examples=100, deadline=None)
    def test_cancel_never_changes_catalog(self, stock, data):
        items = [make_item(f"I{n}", qty) for n, qty in enumerate(stock)]
        repo = InMemoryCatalogRepository(items)
        service = CountSessionService(repo, InMemoryCountSessionStore(), clock=DeterministicClock(NOW))
        session = service.start(CountScope.all(), "Fuzz")
        for item in items:
            value = data.draw(st.one_of(st.none(), quantities))
            service.record_count(session.id, item.id, value)

        service.cancel(session.id)

        assert repo.writes == []
        assert [repo.get_item(i.id).quantity for i in items] == stock

    @given(
        stock=st.lists(quantities, min_size=1, max_size=6),
        data=st.data(),
    )
    @settings(max_examples=100, deadline=None)
    def test_finish_applies_exactly_divergences(self, stock, data):
        items = [make_item(f"I{n}", qty) for n, qty in enumerate(stock)]
        repo = InMemoryCatalogRepository(items)
        service = CountSessionService(repo, InMemoryCountSessionStore(), clock=DeterministicClock(NOW))
        session = service.start(CountScope.all(), "Fuzz")
        counted = {}
        for item in items:
            value = data.draw(st.one_of(st.none(), quantities))
            if value is not None:
                service.record_count(session.id, item.id, value)
                counted[item.id] = value

        result = service.finish(session.id)

        book = {i.id: i.quantity for i in items}
        divergent = {k: v for k, v in counted.items() if v != book[k]}
        assert dict(repo.writes) == divergent
        assert result.summary.adjustment_count == len(divergent)
        for item in items:
            assert repo.get_item(item.id).quantity == counted.get(item.id, item.quantity)


class TestOrderProperties:

    @given(
        lines=st.lists(
            st.tuples(
                st.integers(min_value=1, max_value=1_000),
                st.decimals(min_value=0, max_value=10_000, places=2),
                st.booleans(),
            ),
            max_size=10,
        ),
    )
    @settings(max_examples=200, deadline=None)
    def test_total_is_sum_of_selected_lines(self, lines):
        suggestions = [
            ReplenishmentSuggestion(
                item_id=f"I{n}",
                kind=SuggestionKind.LOW,
                suggested_quantity=qty,
                reference_price=price,
                item_name=f"Item {n}",
                current_stock=0,
                min_stock=10,
                days_until_stockout=None,
            )
            for n, (qty, price, _) in enumerate(lines)
        ]
        draft = PurchaseOrderDraftBuilder().build(suggestions=suggestions, created_at=NOW)
        for n, (_, _, selected) in enumerate(lines):
            draft = draft.with_selection(f"I{n}", selected)

        expected = sum(
            (price * qty for qty, price, selected in lines if selected),
            Decimal("0"),
        )
        assert draft.total == expected
