import math
from datetime import date, datetime
from typing import Optional

import pytest

from aggregation import LedgerAggregator
from ledger import LedgerSnapshot
from models import (
    ExpenseEntryKind,
    ExpenseTransaction,
    Ingredient,
    IngredientUsage,
    MealPrepSession,
    Payroll,
    PayrollStatus,
    RecurringExpense,
    Sale,
    SaleItem,
    SaleStatus,
    WasteRecord,
)
from periods import Period

JANUARY = Period("custom", date(2025, 1, 1), date(2025, 1, 31))
FIRST_QUARTER = Period("custom", date(2025, 1, 1), date(2025, 3, 31))


def _recurring(
    amount_cents: int,
    cadence: str = "MONTHLY",
    category: Optional[str] = "RENT",
    start: date = date(2025, 1, 1),
    end: Optional[date] = None,
) -> RecurringExpense:
    return RecurringExpense(
        restaurant_id=1,
        name=f"{category} {cadence}",
        category=category,
        amount_cents=amount_cents,
        cadence=cadence,
        start_date=start,
        end_date=end,
    )


def _sale(
    when: datetime, total_cents: int, items: list[tuple[int, Optional[int], int]]
) -> Sale:
    return Sale(
        restaurant_id=1,
        timestamp=when,
        total_cents=total_cents,
        status=SaleStatus.completed,
        items=[
            SaleItem(quantity=quantity, cost_cents=cost, price_cents=price)
            for quantity, cost, price in items
        ],
    )


def _txn(
    amount_cents: int,
    on: date,
    category: str = "OTHER",
    kind: ExpenseEntryKind = ExpenseEntryKind.plain,
    waste_record_id: Optional[int] = None,
) -> ExpenseTransaction:
    return ExpenseTransaction(
        restaurant_id=1,
        name=category.title(),
        category=category,
        amount_cents=amount_cents,
        date=on,
        kind=kind,
        waste_record_id=waste_record_id,
    )


def _prep(on: date, usages: list[tuple[float, float]]) -> MealPrepSession:
    return MealPrepSession(
        restaurant_id=1,
        prep_date=on,
        usages=[
            IngredientUsage(
                quantity_used=quantity,
                ingredient=Ingredient(name="Stock", cost_per_unit_cents=cost),
            )
            for quantity, cost in usages
        ],
    )


def _by_day(buckets):
    return {bucket.day: bucket for bucket in buckets}


def test_scenario_month_with_rent_sale_and_waste():
    snapshot = LedgerSnapshot(
        recurring_expenses=[_recurring(1_000_000)],
        sales=[_sale(datetime(2025, 1, 5, 19, 30), 500_000, [(1, 200_000, 500_000)])],
        waste_records=[WasteRecord(id=1, cost_cents=50_000, date=date(2025, 1, 10))],
    )
    buckets = LedgerAggregator(snapshot, JANUARY).daily_buckets()
    days = _by_day(buckets)
    rent_share = 1_000_000 / 31

    assert len(buckets) == 31
    assert days[date(2025, 1, 5)].revenue == 500_000
    assert days[date(2025, 1, 5)].cogs == 200_000
    assert days[date(2025, 1, 10)].expenses == pytest.approx(rent_share + 50_000)
    assert days[date(2025, 1, 20)].expenses == pytest.approx(rent_share)
    total_net = sum(bucket.net_profit for bucket in buckets)
    assert total_net == pytest.approx(500_000 - 200_000 - 1_000_000 - 50_000)


def test_buckets_are_ascending_and_cover_every_day():
    period = Period("custom", date(2025, 2, 26), date(2025, 3, 3))
    buckets = LedgerAggregator(LedgerSnapshot(), period).daily_buckets()
    assert [bucket.day for bucket in buckets] == list(period.days())


def test_empty_snapshot_yields_zero_filled_series():
    buckets = LedgerAggregator(LedgerSnapshot(), JANUARY).daily_buckets()
    assert len(buckets) == 31
    for bucket in buckets:
        assert bucket.revenue == 0
        assert bucket.net_profit == 0
        assert bucket.margin == 0


def test_daily_revenue_sums_to_sale_totals():
    sales = [
        _sale(datetime(2025, 1, 1, 0, 0), 12_000, [(2, 3_000, 6_000)]),
        _sale(datetime(2025, 1, 1, 23, 59, 59), 8_000, []),
        _sale(datetime(2025, 1, 17, 12, 0), 45_500, [(1, 10_000, 45_500)]),
        _sale(datetime(2025, 1, 31, 22, 0), 3_300, [(3, 500, 1_100)]),
    ]
    buckets = LedgerAggregator(LedgerSnapshot(sales=sales), JANUARY).daily_buckets()
    assert sum(bucket.revenue for bucket in buckets) == sum(s.total_cents for s in sales)
    assert _by_day(buckets)[date(2025, 1, 1)].revenue == 20_000
    assert _by_day(buckets)[date(2025, 1, 1)].cogs == 6_000


def test_waste_counted_once_when_mirrored_by_transaction():
    waste = WasteRecord(id=9, cost_cents=50_000, date=date(2025, 1, 10))
    mirror = _txn(
        50_000,
        date(2025, 1, 10),
        kind=ExpenseEntryKind.waste_derived,
        waste_record_id=9,
    )
    snapshot = LedgerSnapshot(waste_records=[waste], transactions=[mirror])
    aggregator = LedgerAggregator(snapshot, JANUARY)

    day = _by_day(aggregator.daily_buckets())[date(2025, 1, 10)]
    assert day.expenses == 50_000
    assert aggregator.category_totals() == {"Waste": 50_000}
    assert aggregator.detailed_statement_totals().expenses == 50_000


def test_plain_transactions_land_on_their_day():
    snapshot = LedgerSnapshot(
        transactions=[
            _txn(7_500, date(2025, 1, 3), category="MAINTENANCE"),
            _txn(2_500, date(2025, 1, 3)),
        ]
    )
    day = _by_day(LedgerAggregator(snapshot, JANUARY).daily_buckets())[date(2025, 1, 3)]
    assert day.expenses == 10_000


def test_margin_is_zero_without_revenue():
    snapshot = LedgerSnapshot(
        transactions=[_txn(1_000, date(2025, 1, 2))],
        recurring_expenses=[_recurring(31_000, cadence="DAILY")],
    )
    for bucket in LedgerAggregator(snapshot, JANUARY).daily_buckets():
        assert bucket.margin == 0
        assert math.isfinite(bucket.margin)
        assert bucket.net_profit < 0


def test_margin_is_percent_of_revenue():
    snapshot = LedgerSnapshot(
        sales=[_sale(datetime(2025, 1, 1, 12, 0), 10_000, [(1, 4_000, 10_000)])]
    )
    period = Period("custom", date(2025, 1, 1), date(2025, 1, 1))
    (bucket,) = LedgerAggregator(snapshot, period).daily_buckets()
    assert bucket.net_profit == 6_000
    assert bucket.margin == pytest.approx(60.0)


def test_payroll_is_spread_flat_across_days():
    snapshot = LedgerSnapshot(
        payrolls=[
            Payroll(
                total_paid_cents=20_000,
                period=date(2025, 1, 1),
                paid_date=date(2025, 1, 31),
                status=PayrollStatus.paid,
            ),
            Payroll(
                total_paid_cents=11_000,
                period=date(2025, 1, 15),
                status=PayrollStatus.paid,
            ),
        ]
    )
    buckets = LedgerAggregator(snapshot, JANUARY).daily_buckets()
    assert {bucket.payroll for bucket in buckets} == {1_000}


def test_meal_prep_adds_cogs_on_prep_date():
    snapshot = LedgerSnapshot(
        meal_prep_sessions=[_prep(date(2025, 1, 4), [(2.5, 400), (10, 35)])]
    )
    day = _by_day(LedgerAggregator(snapshot, JANUARY).daily_buckets())[date(2025, 1, 4)]
    assert day.cogs == pytest.approx(1_350)


def test_recurring_share_is_flat_even_for_partial_expenses():
    # Starts on the 21st, but the window total is still spread over all 31 days.
    snapshot = LedgerSnapshot(
        recurring_expenses=[_recurring(3_100, cadence="DAILY", start=date(2025, 1, 21))]
    )
    buckets = LedgerAggregator(snapshot, JANUARY).daily_buckets()
    expected = 3_100 * 11 / 31
    assert all(bucket.expenses == pytest.approx(expected) for bucket in buckets)


def test_scenario_quarter_category_breakdown():
    snapshot = LedgerSnapshot(
        recurring_expenses=[
            _recurring(1_000_000, start=date(2024, 6, 1)),
            _recurring(500_000, start=date(2025, 2, 15), end=date(2025, 12, 31)),
        ],
        transactions=[_txn(200_000, date(2025, 2, 3), category="MARKETING")],
        waste_records=[WasteRecord(cost_cents=30_000, date=date(2025, 3, 12))],
    )
    totals = LedgerAggregator(snapshot, FIRST_QUARTER).category_totals()
    assert set(totals) == {"RENT", "MARKETING", "Waste"}
    assert totals["RENT"] == 3_000_000 + 1_000_000
    assert totals["MARKETING"] == 200_000
    assert totals["Waste"] == 30_000


def test_category_labels_for_other_and_uncategorised():
    snapshot = LedgerSnapshot(
        recurring_expenses=[
            _recurring(1_000, cadence="DAILY", category=None),
            _recurring(9_999, category="UTILITIES", start=date(2026, 1, 1)),
        ],
        transactions=[_txn(4_000, date(2025, 1, 8), category="OTHER")],
    )
    totals = LedgerAggregator(snapshot, JANUARY).category_totals()
    assert totals == {"General": 31_000, "UTILITIES": 0, "Other": 4_000}


def test_recurring_outside_window_keeps_zero_category():
    snapshot = LedgerSnapshot(
        recurring_expenses=[_recurring(9_999, category="UTILITIES", start=date(2026, 1, 1))]
    )
    aggregator = LedgerAggregator(snapshot, JANUARY)
    assert aggregator.category_totals() == {"UTILITIES": 0}

    statement = aggregator.statement_totals()
    assert statement.expense_by_category == {"UTILITIES": 0}
    assert statement.total_expenses == 0

    detailed = aggregator.detailed_statement_totals()
    assert detailed.expense_by_category == {"UTILITIES": 0}


def test_no_waste_key_without_waste_cost():
    snapshot = LedgerSnapshot(waste_records=[WasteRecord(cost_cents=0, date=date(2025, 1, 2))])
    assert LedgerAggregator(snapshot, JANUARY).category_totals() == {}


def test_statement_totals():
    snapshot = LedgerSnapshot(
        recurring_expenses=[
            _recurring(1_000_000),
            _recurring(2_000, cadence="DAILY", category="UTILITIES"),
        ],
        sales=[
            _sale(datetime(2025, 1, 5, 12, 0), 500_000, [(2, 100_000, 250_000)]),
            _sale(datetime(2025, 1, 6, 12, 0), 300_000, [(1, 50_000, 300_000)]),
        ],
        payrolls=[
            Payroll(total_paid_cents=120_000, period=date(2025, 1, 1), status=PayrollStatus.paid)
        ],
    )
    totals = LedgerAggregator(snapshot, JANUARY).statement_totals()
    assert totals.total_revenue == 800_000
    assert totals.total_cogs == 250_000
    assert totals.gross_profit == 550_000
    assert totals.payroll_total == 120_000
    assert totals.expense_by_category == {"RENT": 1_000_000, "UTILITIES": 62_000}
    assert totals.total_expenses == 1_062_000
    assert totals.net_profit == 550_000 - 1_062_000 - 120_000


def test_statement_ignores_one_time_and_waste():
    snapshot = LedgerSnapshot(
        transactions=[_txn(5_000, date(2025, 1, 2), category="MARKETING")],
        waste_records=[WasteRecord(cost_cents=7_000, date=date(2025, 1, 2))],
    )
    totals = LedgerAggregator(snapshot, JANUARY).statement_totals()
    assert totals.expense_by_category == {}
    assert totals.total_expenses == 0
    assert totals.net_profit == 0


def test_detailed_statement_splits_cogs_and_coverage():
    snapshot = LedgerSnapshot(
        recurring_expenses=[_recurring(100_000)],
        sales=[
            _sale(
                datetime(2025, 1, 9, 20, 0),
                500_000,
                [(1, 20_000, 400_000), (1, None, 100_000)],
            )
        ],
        meal_prep_sessions=[_prep(date(2025, 1, 9), [(4, 1_000)])],
        transactions=[
            _txn(
                6_000,
                date(2025, 1, 11),
                category="OTHER",
                kind=ExpenseEntryKind.cogs_adjustment,
            ),
            _txn(9_000, date(2025, 1, 12), category="INVENTORY_PURCHASE"),
            _txn(1_000, date(2025, 1, 12)),
        ],
        waste_records=[WasteRecord(cost_cents=2_000, date=date(2025, 1, 13))],
        payrolls=[
            Payroll(total_paid_cents=50_000, period=date(2025, 1, 1), status=PayrollStatus.paid)
        ],
    )
    totals = LedgerAggregator(snapshot, JANUARY).detailed_statement_totals()
    assert totals.revenue == 500_000
    assert totals.cogs_from_sales == 20_000
    assert totals.cogs_from_meal_prep == 4_000
    assert totals.cogs_from_manual_adjustments == 6_000
    assert totals.cogs == 30_000
    assert totals.gross_profit == 470_000
    assert totals.expense_by_category == {
        "RENT": 100_000,
        "INVENTORY_PURCHASE": 9_000,
        "Other": 1_000,
        "Waste": 2_000,
    }
    assert totals.expenses == 112_000
    assert totals.payroll == 50_000
    assert totals.net_profit == 470_000 - 112_000 - 50_000
    assert totals.revenue_with_costing == 400_000
    assert totals.cogs_coverage_percent == 80


def test_detailed_statement_full_coverage_without_revenue():
    totals = LedgerAggregator(LedgerSnapshot(), JANUARY).detailed_statement_totals()
    assert totals.cogs_coverage_percent == 100
    assert totals.net_profit == 0
