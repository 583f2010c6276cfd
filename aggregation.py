from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from ledger import LedgerSnapshot
from models import (
    ExpenseTransaction,
    MealPrepSession,
    OTHER_CATEGORY,
    RecurringExpense,
    Sale,
)
from periods import Period
from proration import attributed_amount, total_attributed

logger = logging.getLogger(__name__)

GENERAL_LABEL = "General"
OTHER_LABEL = "Other"
WASTE_LABEL = "Waste"


def sale_cogs(sale: Sale) -> float:
    return float(
        sum((item.cost_cents or 0) * (item.quantity or 0) for item in sale.items)
    )


def prep_cogs(prep: MealPrepSession) -> float:
    return float(
        sum(
            (usage.quantity_used or 0) * (usage.ingredient.cost_per_unit_cents or 0)
            for usage in prep.usages
        )
    )


def recurring_label(expense: RecurringExpense) -> str:
    return expense.category or GENERAL_LABEL


def transaction_label(txn: ExpenseTransaction) -> str:
    if txn.category == OTHER_CATEGORY:
        return OTHER_LABEL
    return txn.category


@dataclass
class DayBucket:
    day: date
    revenue: float = 0.0
    cogs: float = 0.0
    expenses: float = 0.0
    payroll: float = 0.0

    @property
    def net_profit(self) -> float:
        return self.revenue - self.cogs - self.expenses - self.payroll

    @property
    def margin(self) -> float:
        if self.revenue > 0:
            return (self.net_profit / self.revenue) * 100
        return 0.0


@dataclass(frozen=True)
class StatementTotals:
    total_revenue: float
    total_cogs: float
    gross_profit: float
    total_expenses: float
    payroll_total: float
    net_profit: float
    expense_by_category: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class DetailedStatementTotals:
    revenue: float
    cogs: float
    cogs_from_sales: float
    cogs_from_meal_prep: float
    cogs_from_manual_adjustments: float
    gross_profit: float
    expenses: float
    payroll: float
    net_profit: float
    cogs_coverage_percent: int
    revenue_with_costing: float
    expense_by_category: dict[str, float] = field(default_factory=dict)


class LedgerAggregator:
    """Folds one snapshot into day buckets, category totals or statement totals.

    The folds only add into accumulators, so the order in which the snapshot's
    collections were fetched does not matter.
    """

    def __init__(self, snapshot: LedgerSnapshot, period: Period) -> None:
        self.snapshot = snapshot
        self.period = period

    def recurring_total(self) -> float:
        return total_attributed(
            self.snapshot.recurring_expenses, self.period.start, self.period.end
        )

    def recurring_by_category(self) -> dict[str, float]:
        totals: dict[str, float] = {}
        for expense in self.snapshot.recurring_expenses:
            # Expenses outside the window still emit their label with 0.
            amount = attributed_amount(expense, self.period.start, self.period.end)
            key = recurring_label(expense)
            totals[key] = totals.get(key, 0.0) + amount
        return totals

    def waste_total(self) -> float:
        return float(sum(waste.cost_cents for waste in self.snapshot.waste_records))

    def payroll_total(self) -> float:
        return float(
            sum(payroll.total_paid_cents for payroll in self.snapshot.payrolls)
        )

    def revenue_total(self) -> float:
        return float(sum(sale.total_cents for sale in self.snapshot.sales))

    def sales_cogs_total(self) -> float:
        return sum((sale_cogs(sale) for sale in self.snapshot.sales), 0.0)

    def daily_buckets(self) -> list[DayBucket]:
        # Recurring expenses and payroll are spread flat over the window rather
        # than placed on the days they actually fall due or were paid.
        day_count = self.period.day_count
        recurring_share = self.recurring_total() / day_count if day_count > 0 else 0.0
        payroll_share = self.payroll_total() / day_count if day_count > 0 else 0.0
        logger.debug(
            f"daily_buckets: period={self.period.label()} days={day_count} "
            f"recurring_share={recurring_share:.2f} payroll_share={payroll_share:.2f}"
        )

        buckets = {
            day: DayBucket(day=day, expenses=recurring_share, payroll=payroll_share)
            for day in self.period.days()
        }

        for sale in self.snapshot.sales:
            bucket = buckets.get(sale.timestamp.date())
            if bucket is None:
                continue
            bucket.revenue += sale.total_cents
            bucket.cogs += sale_cogs(sale)

        for prep in self.snapshot.meal_prep_sessions:
            bucket = buckets.get(prep.prep_date)
            if bucket is None:
                continue
            bucket.cogs += prep_cogs(prep)

        for txn in self.snapshot.transactions:
            if txn.is_waste_derived:
                continue
            bucket = buckets.get(txn.date)
            if bucket is None:
                continue
            bucket.expenses += txn.amount_cents

        for waste in self.snapshot.waste_records:
            bucket = buckets.get(waste.date)
            if bucket is None:
                continue
            bucket.expenses += waste.cost_cents

        return [buckets[day] for day in sorted(buckets)]

    def category_totals(self) -> dict[str, float]:
        totals = self.recurring_by_category()
        for txn in self.snapshot.transactions:
            if txn.is_waste_derived:
                continue
            key = transaction_label(txn)
            totals[key] = totals.get(key, 0.0) + txn.amount_cents
        waste = self.waste_total()
        if waste > 0:
            totals[WASTE_LABEL] = totals.get(WASTE_LABEL, 0.0) + waste
        return totals

    def statement_totals(self) -> StatementTotals:
        total_revenue = self.revenue_total()
        total_cogs = self.sales_cogs_total()
        gross_profit = total_revenue - total_cogs
        payroll_total = self.payroll_total()
        expense_by_category = self.recurring_by_category()
        total_expenses = sum(expense_by_category.values(), 0.0)
        return StatementTotals(
            total_revenue=total_revenue,
            total_cogs=total_cogs,
            gross_profit=gross_profit,
            total_expenses=total_expenses,
            payroll_total=payroll_total,
            net_profit=gross_profit - total_expenses - payroll_total,
            expense_by_category=expense_by_category,
        )

    def detailed_statement_totals(self) -> DetailedStatementTotals:
        revenue = self.revenue_total()

        revenue_with_costing = 0.0
        for sale in self.snapshot.sales:
            for item in sale.items:
                if item.cost_cents is not None and item.cost_cents >= 0:
                    revenue_with_costing += (item.price_cents or 0) * (
                        item.quantity or 0
                    )
        if revenue > 0:
            coverage = round(revenue_with_costing / revenue * 100)
        else:
            coverage = 100

        cogs_from_sales = self.sales_cogs_total()
        cogs_from_meal_prep = sum(
            (prep_cogs(prep) for prep in self.snapshot.meal_prep_sessions), 0.0
        )

        expense_by_category = self.recurring_by_category()
        cogs_from_adjustments = 0.0
        for txn in self.snapshot.transactions:
            if txn.is_waste_derived:
                continue
            if txn.is_cogs_adjustment:
                # Booked as cost of goods, not as an operating expense.
                cogs_from_adjustments += txn.amount_cents
                continue
            key = transaction_label(txn)
            expense_by_category[key] = expense_by_category.get(key, 0.0) + txn.amount_cents
        waste = self.waste_total()
        if waste > 0:
            expense_by_category[WASTE_LABEL] = (
                expense_by_category.get(WASTE_LABEL, 0.0) + waste
            )

        cogs = cogs_from_sales + cogs_from_meal_prep + cogs_from_adjustments
        gross_profit = revenue - cogs
        expenses = sum(expense_by_category.values(), 0.0)
        payroll = self.payroll_total()
        return DetailedStatementTotals(
            revenue=revenue,
            cogs=cogs,
            cogs_from_sales=cogs_from_sales,
            cogs_from_meal_prep=cogs_from_meal_prep,
            cogs_from_manual_adjustments=cogs_from_adjustments,
            gross_profit=gross_profit,
            expenses=expenses,
            payroll=payroll,
            net_profit=gross_profit - expenses - payroll,
            cogs_coverage_percent=int(coverage),
            revenue_with_costing=revenue_with_costing,
            expense_by_category=expense_by_category,
        )
