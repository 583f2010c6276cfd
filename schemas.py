import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models import ExpenseEntryKind


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DailySeriesPoint(CamelModel):
    date: dt.date
    revenue: float
    margin: float
    net_profit: float


CategoryBreakdown = dict[str, float]


class Statement(CamelModel):
    total_revenue: float
    total_cogs: float = Field(alias="totalCOGS")
    gross_profit: float
    total_expenses: float
    payroll_total: float
    net_profit: float
    expense_by_category: CategoryBreakdown


class StatementSummary(CamelModel):
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


class RecurringExpenseOut(CamelModel):
    id: int
    name: str
    category: Optional[str] = None
    amount: int
    cadence: str
    start_date: dt.date
    end_date: Optional[dt.date] = None
    total_for_range: Optional[float] = None


class ExpenseTransactionOut(CamelModel):
    id: int
    name: str
    category: str
    amount: int
    date: dt.date
    notes: Optional[str] = None
    kind: ExpenseEntryKind
    waste_record_id: Optional[int] = None


class WasteRecordOut(CamelModel):
    id: int
    ingredient_id: Optional[int] = None
    ingredient_name: Optional[str] = None
    quantity: Optional[float] = None
    reason: Optional[str] = None
    cost: int
    date: dt.date


class MealPrepSessionOut(CamelModel):
    id: int
    prep_date: dt.date
    prepared_by: Optional[str] = None
    total_cost: float


class PayrollOut(CamelModel):
    id: int
    employee_name: Optional[str] = None
    period: dt.date
    paid_date: Optional[dt.date] = None
    total_paid: int
    notes: Optional[str] = None


class SaleItemOut(CamelModel):
    menu_item_id: Optional[int] = None
    name: Optional[str] = None
    quantity: int
    price: int
    cost: Optional[int] = None


class SaleOut(CamelModel):
    id: int
    order_number: Optional[str] = None
    total: int
    timestamp: dt.datetime
    items: list[SaleItemOut] = Field(default_factory=list)


class DetailedStatement(CamelModel):
    """P&L summary plus the records it was computed from."""

    start: dt.date
    end: dt.date
    summary: StatementSummary
    expense_by_category: CategoryBreakdown
    expenses: list[RecurringExpenseOut] = Field(default_factory=list)
    expense_transactions: list[ExpenseTransactionOut] = Field(default_factory=list)
    waste_records: list[WasteRecordOut] = Field(default_factory=list)
    meal_prep_sessions: list[MealPrepSessionOut] = Field(default_factory=list)
    payrolls: list[PayrollOut] = Field(default_factory=list)
    sales: list[SaleOut] = Field(default_factory=list)


class DishRevenue(CamelModel):
    menu_item_id: Optional[int] = None
    name: str
    quantity: int
    revenue: float
    orders: int


class ActivityReminder(CamelModel):
    needs_reminder: bool
    days_since_activity: int
    most_recent_activity: Optional[dt.datetime] = None
