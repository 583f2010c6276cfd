from typing import Optional

from aggregation import DayBucket, DetailedStatementTotals, StatementTotals, prep_cogs
from ledger import LedgerSnapshot
from models import (
    ExpenseTransaction,
    MealPrepSession,
    Payroll,
    RecurringExpense,
    Sale,
    WasteRecord,
)
from periods import Period
from proration import attributed_amount
from schemas import (
    CategoryBreakdown,
    DailySeriesPoint,
    DetailedStatement,
    ExpenseTransactionOut,
    MealPrepSessionOut,
    PayrollOut,
    RecurringExpenseOut,
    SaleItemOut,
    SaleOut,
    Statement,
    StatementSummary,
    WasteRecordOut,
)


def to_daily_series(buckets: list[DayBucket]) -> list[DailySeriesPoint]:
    return [
        DailySeriesPoint(
            date=bucket.day,
            revenue=bucket.revenue,
            margin=bucket.margin,
            net_profit=bucket.net_profit,
        )
        for bucket in buckets
    ]


def to_category_breakdown(totals: dict[str, float]) -> CategoryBreakdown:
    return dict(totals)


def to_statement(totals: StatementTotals) -> Statement:
    return Statement(
        total_revenue=totals.total_revenue,
        total_cogs=totals.total_cogs,
        gross_profit=totals.gross_profit,
        total_expenses=totals.total_expenses,
        payroll_total=totals.payroll_total,
        net_profit=totals.net_profit,
        expense_by_category=dict(totals.expense_by_category),
    )


def to_recurring_expense(
    expense: RecurringExpense, total_for_range: Optional[float] = None
) -> RecurringExpenseOut:
    return RecurringExpenseOut(
        id=expense.id,
        name=expense.name,
        category=expense.category,
        amount=expense.amount_cents,
        cadence=expense.cadence,
        start_date=expense.start_date,
        end_date=expense.end_date,
        total_for_range=total_for_range,
    )


def to_expense_transaction(txn: ExpenseTransaction) -> ExpenseTransactionOut:
    return ExpenseTransactionOut(
        id=txn.id,
        name=txn.name,
        category=txn.category,
        amount=txn.amount_cents,
        date=txn.date,
        notes=txn.notes,
        kind=txn.kind,
        waste_record_id=txn.waste_record_id,
    )


def to_waste_record(waste: WasteRecord) -> WasteRecordOut:
    return WasteRecordOut(
        id=waste.id,
        ingredient_id=waste.ingredient_id,
        ingredient_name=waste.ingredient.name if waste.ingredient else None,
        quantity=waste.quantity,
        reason=waste.reason,
        cost=waste.cost_cents,
        date=waste.date,
    )


def to_meal_prep_session(prep: MealPrepSession) -> MealPrepSessionOut:
    return MealPrepSessionOut(
        id=prep.id,
        prep_date=prep.prep_date,
        prepared_by=prep.prepared_by,
        total_cost=prep_cogs(prep),
    )


def to_payroll(payroll: Payroll) -> PayrollOut:
    return PayrollOut(
        id=payroll.id,
        employee_name=payroll.employee_name,
        period=payroll.period,
        paid_date=payroll.paid_date,
        total_paid=payroll.total_paid_cents,
        notes=payroll.notes,
    )


def to_sale(sale: Sale) -> SaleOut:
    return SaleOut(
        id=sale.id,
        order_number=sale.order_number,
        total=sale.total_cents,
        timestamp=sale.timestamp,
        items=[
            SaleItemOut(
                menu_item_id=item.menu_item_id,
                name=item.menu_item.name if item.menu_item else item.name,
                quantity=item.quantity,
                price=item.price_cents,
                cost=item.cost_cents,
            )
            for item in sale.items
        ],
    )


def to_detailed_statement(
    totals: DetailedStatementTotals, period: Period, snapshot: LedgerSnapshot
) -> DetailedStatement:
    return DetailedStatement(
        start=period.start,
        end=period.end,
        summary=StatementSummary(
            revenue=totals.revenue,
            cogs=totals.cogs,
            cogs_from_sales=totals.cogs_from_sales,
            cogs_from_meal_prep=totals.cogs_from_meal_prep,
            cogs_from_manual_adjustments=totals.cogs_from_manual_adjustments,
            gross_profit=totals.gross_profit,
            expenses=totals.expenses,
            payroll=totals.payroll,
            net_profit=totals.net_profit,
            cogs_coverage_percent=totals.cogs_coverage_percent,
            revenue_with_costing=totals.revenue_with_costing,
        ),
        expense_by_category=dict(totals.expense_by_category),
        expenses=[
            to_recurring_expense(
                expense, attributed_amount(expense, period.start, period.end)
            )
            for expense in snapshot.recurring_expenses
        ],
        expense_transactions=[to_expense_transaction(t) for t in snapshot.transactions],
        waste_records=[to_waste_record(w) for w in snapshot.waste_records],
        meal_prep_sessions=[to_meal_prep_session(p) for p in snapshot.meal_prep_sessions],
        payrolls=[to_payroll(p) for p in snapshot.payrolls],
        sales=[to_sale(s) for s in snapshot.sales],
    )
