from __future__ import annotations

import logging
from datetime import datetime, time, timedelta
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from aggregation import LedgerAggregator
from ledger import EXPENSE_SOURCES, STATEMENT_SOURCES, gather_snapshot
from models import (
    ExpenseTransaction,
    MenuItem,
    RecurringExpense,
    Sale,
    SaleItem,
    SaleStatus,
    WasteRecord,
)
from periods import Period, local_now
from projections import (
    to_category_breakdown,
    to_daily_series,
    to_detailed_statement,
    to_recurring_expense,
    to_statement,
)
from proration import attributed_amount
from schemas import (
    ActivityReminder,
    CategoryBreakdown,
    DailySeriesPoint,
    DetailedStatement,
    DishRevenue,
    RecurringExpenseOut,
    Statement,
)

logger = logging.getLogger(__name__)

REMINDER_WINDOW_DAYS = 7
# Reported when nothing was recorded inside the reminder window.
NO_ACTIVITY_DAYS = 999
UNKNOWN_DISH = "Unknown"


class ReportService:
    """Read-only P&L reports for one restaurant.

    Each call gathers a fresh snapshot for its window; nothing is cached
    between calls and nothing is written.
    """

    def __init__(self, session_factory: sessionmaker, restaurant_id: int) -> None:
        self.session_factory = session_factory
        self.restaurant_id = restaurant_id

    def _aggregator(
        self, period: Period, sources: Optional[tuple[str, ...]] = None
    ) -> LedgerAggregator:
        snapshot = gather_snapshot(
            self.session_factory, self.restaurant_id, period, sources=sources
        )
        return LedgerAggregator(snapshot, period)

    def daily_revenue_margin(self, period: Period) -> list[DailySeriesPoint]:
        buckets = self._aggregator(period).daily_buckets()
        return to_daily_series(buckets)

    def expenses_by_category(self, period: Period) -> CategoryBreakdown:
        totals = self._aggregator(period, EXPENSE_SOURCES).category_totals()
        return to_category_breakdown(totals)

    def statement(self, period: Period) -> Statement:
        totals = self._aggregator(period, STATEMENT_SOURCES).statement_totals()
        logger.info(
            f"statement_built: restaurant_id={self.restaurant_id} "
            f"period={period.label()} net_profit={totals.net_profit:.2f}"
        )
        return to_statement(totals)

    def pnl_data(self, period: Period) -> DetailedStatement:
        aggregator = self._aggregator(period)
        totals = aggregator.detailed_statement_totals()
        return to_detailed_statement(totals, period, aggregator.snapshot)

    def revenue_by_dish(self, period: Optional[Period] = None) -> list[DishRevenue]:
        """Completed-sale line items grouped by menu item, all time without a period."""
        quantity = func.coalesce(func.sum(SaleItem.quantity), 0).label("quantity")
        revenue = func.coalesce(
            func.sum(SaleItem.price_cents * SaleItem.quantity), 0
        ).label("revenue")
        orders = func.count(func.distinct(SaleItem.sale_id)).label("orders")
        stmt = (
            select(SaleItem.menu_item_id, MenuItem.name, quantity, revenue, orders)
            .join(Sale, SaleItem.sale_id == Sale.id)
            .outerjoin(MenuItem, SaleItem.menu_item_id == MenuItem.id)
            .where(
                Sale.restaurant_id == self.restaurant_id,
                Sale.status == SaleStatus.completed,
            )
            .group_by(SaleItem.menu_item_id, MenuItem.name)
            .order_by(revenue.desc(), SaleItem.menu_item_id)
        )
        if period is not None:
            stmt = stmt.where(
                Sale.timestamp.between(
                    datetime.combine(period.start, time.min),
                    datetime.combine(period.end, time.max),
                )
            )
        with self.session_factory() as session:
            rows = session.execute(stmt).all()
        return [
            DishRevenue(
                menu_item_id=row.menu_item_id,
                name=row.name or UNKNOWN_DISH,
                quantity=int(row.quantity),
                revenue=float(row.revenue),
                orders=int(row.orders),
            )
            for row in rows
        ]

    def activity_reminder(self, now: Optional[datetime] = None) -> ActivityReminder:
        """Whether anything feeding the P&L was recorded in the last week."""
        now = now or local_now()
        cutoff = now - timedelta(days=REMINDER_WINDOW_DAYS)
        with self.session_factory() as session:
            last_txn = session.scalar(
                select(func.max(ExpenseTransaction.date)).where(
                    ExpenseTransaction.restaurant_id == self.restaurant_id,
                    ExpenseTransaction.date.between(cutoff.date(), now.date()),
                )
            )
            last_waste = session.scalar(
                select(func.max(WasteRecord.date)).where(
                    WasteRecord.restaurant_id == self.restaurant_id,
                    WasteRecord.date.between(cutoff.date(), now.date()),
                )
            )
            last_sale = session.scalar(
                select(func.max(Sale.timestamp)).where(
                    Sale.restaurant_id == self.restaurant_id,
                    Sale.status == SaleStatus.completed,
                    Sale.timestamp.between(cutoff, now),
                )
            )

        seen = [datetime.combine(day, time.min) for day in (last_txn, last_waste) if day]
        if last_sale is not None:
            seen.append(last_sale)
        most_recent = max(seen) if seen else None
        if most_recent is None:
            days_since = NO_ACTIVITY_DAYS
        else:
            days_since = max(0, (now - most_recent).days)
        logger.info(
            f"activity_checked: restaurant_id={self.restaurant_id} "
            f"days_since_activity={days_since}"
        )
        return ActivityReminder(
            needs_reminder=most_recent is None or days_since >= REMINDER_WINDOW_DAYS,
            days_since_activity=days_since,
            most_recent_activity=most_recent,
        )


class RecurringExpenseService:
    def __init__(self, session: Session, restaurant_id: int) -> None:
        self.session = session
        self.restaurant_id = restaurant_id

    def list(self, category: Optional[str] = None) -> list[RecurringExpense]:
        stmt = (
            select(RecurringExpense)
            .where(RecurringExpense.restaurant_id == self.restaurant_id)
            .order_by(RecurringExpense.start_date.desc(), RecurringExpense.id.desc())
        )
        if category:
            stmt = stmt.where(RecurringExpense.category == category)
        return list(self.session.scalars(stmt).all())

    def list_with_totals(
        self, period: Optional[Period] = None, category: Optional[str] = None
    ) -> list[RecurringExpenseOut]:
        expenses = self.list(category)
        if period is None:
            return [to_recurring_expense(expense) for expense in expenses]
        return [
            to_recurring_expense(
                expense, attributed_amount(expense, period.start, period.end)
            )
            for expense in expenses
        ]
