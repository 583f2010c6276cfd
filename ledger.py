from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Callable, Iterable, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload, sessionmaker

from config import get_settings
from models import (
    ExpenseTransaction,
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

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerSnapshot:
    """Every source record one report needs, read once for one window."""

    recurring_expenses: list[RecurringExpense] = field(default_factory=list)
    transactions: list[ExpenseTransaction] = field(default_factory=list)
    waste_records: list[WasteRecord] = field(default_factory=list)
    payrolls: list[Payroll] = field(default_factory=list)
    sales: list[Sale] = field(default_factory=list)
    meal_prep_sessions: list[MealPrepSession] = field(default_factory=list)


def fetch_recurring_expenses(
    session: Session, restaurant_id: int, period: Period
) -> list[RecurringExpense]:
    # Unfiltered by date; proration decides what overlaps.
    stmt = select(RecurringExpense).where(
        RecurringExpense.restaurant_id == restaurant_id
    )
    return list(session.scalars(stmt).all())


def fetch_transactions(
    session: Session, restaurant_id: int, period: Period
) -> list[ExpenseTransaction]:
    stmt = select(ExpenseTransaction).where(
        ExpenseTransaction.restaurant_id == restaurant_id,
        ExpenseTransaction.date.between(period.start, period.end),
    )
    return list(session.scalars(stmt).all())


def fetch_waste_records(
    session: Session, restaurant_id: int, period: Period
) -> list[WasteRecord]:
    stmt = (
        select(WasteRecord)
        .options(selectinload(WasteRecord.ingredient))
        .where(
            WasteRecord.restaurant_id == restaurant_id,
            WasteRecord.date.between(period.start, period.end),
        )
    )
    return list(session.scalars(stmt).all())


def fetch_payrolls(
    session: Session, restaurant_id: int, period: Period
) -> list[Payroll]:
    stmt = select(Payroll).where(
        Payroll.restaurant_id == restaurant_id,
        Payroll.status == PayrollStatus.paid,
        or_(
            Payroll.paid_date.between(period.start, period.end),
            Payroll.period.between(period.start, period.end),
        ),
    )
    return list(session.scalars(stmt).all())


def fetch_sales(session: Session, restaurant_id: int, period: Period) -> list[Sale]:
    stmt = (
        select(Sale)
        .options(selectinload(Sale.items).selectinload(SaleItem.menu_item))
        .where(
            Sale.restaurant_id == restaurant_id,
            Sale.status == SaleStatus.completed,
            Sale.timestamp.between(
                datetime.combine(period.start, time.min),
                datetime.combine(period.end, time.max),
            ),
        )
    )
    return list(session.scalars(stmt).all())


def fetch_meal_prep_sessions(
    session: Session, restaurant_id: int, period: Period
) -> list[MealPrepSession]:
    stmt = (
        select(MealPrepSession)
        .options(
            selectinload(MealPrepSession.usages).selectinload(
                IngredientUsage.ingredient
            )
        )
        .where(
            MealPrepSession.restaurant_id == restaurant_id,
            MealPrepSession.prep_date.between(period.start, period.end),
        )
    )
    return list(session.scalars(stmt).all())


Fetcher = Callable[[Session, int, Period], list]

FETCHERS: dict[str, Fetcher] = {
    "recurring_expenses": fetch_recurring_expenses,
    "transactions": fetch_transactions,
    "waste_records": fetch_waste_records,
    "payrolls": fetch_payrolls,
    "sales": fetch_sales,
    "meal_prep_sessions": fetch_meal_prep_sessions,
}

EXPENSE_SOURCES = ("recurring_expenses", "transactions", "waste_records")
STATEMENT_SOURCES = ("recurring_expenses", "payrolls", "sales")


def gather_snapshot(
    session_factory: sessionmaker,
    restaurant_id: int,
    period: Period,
    *,
    sources: Optional[Iterable[str]] = None,
    max_workers: Optional[int] = None,
) -> LedgerSnapshot:
    """Fetch the requested source collections concurrently.

    Each fetch runs in its own thread with its own session. Relationships the
    folds need are eagerly loaded, so the returned rows are usable after their
    sessions close. The first fetch error propagates to the caller.
    """
    wanted = tuple(sources) if sources is not None else tuple(FETCHERS)
    unknown = [name for name in wanted if name not in FETCHERS]
    if unknown:
        raise ValueError(f"Unknown ledger sources: {', '.join(unknown)}")
    if not wanted:
        return LedgerSnapshot()

    workers = max_workers or get_settings().fetch_workers

    def run(name: str) -> tuple[str, list]:
        with session_factory() as session:
            return name, FETCHERS[name](session, restaurant_id, period)

    started = datetime.now()
    with ThreadPoolExecutor(max_workers=min(workers, len(wanted))) as pool:
        results = dict(pool.map(run, wanted))
    duration = (datetime.now() - started).total_seconds()
    logger.info(
        f"ledger_gathered: restaurant_id={restaurant_id} period={period.label()} "
        f"sources={len(wanted)} rows={sum(len(rows) for rows in results.values())} "
        f"duration={duration:.3f}s"
    )
    return LedgerSnapshot(**results)
