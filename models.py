import datetime as dt
from enum import Enum
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database import Base


class Cadence(str, Enum):
    daily = "DAILY"
    weekly = "WEEKLY"
    monthly = "MONTHLY"
    annual = "ANNUAL"


class ExpenseEntryKind(str, Enum):
    plain = "plain"
    waste_derived = "waste_derived"
    cogs_adjustment = "cogs_adjustment"


class PayrollStatus(str, Enum):
    pending = "PENDING"
    paid = "PAID"


class SaleStatus(str, Enum):
    pending = "PENDING"
    completed = "COMPLETED"
    cancelled = "CANCELLED"


OTHER_CATEGORY = "OTHER"


def _value_enum(enum_cls: type[Enum], name: str) -> SAEnum:
    return SAEnum(
        enum_cls,
        name=name,
        values_callable=lambda members: [member.value for member in members],
    )


class TimestampMixin:
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime, default=dt.datetime.utcnow, nullable=False
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, default=dt.datetime.utcnow, onupdate=dt.datetime.utcnow, nullable=False
    )


class RecurringExpense(Base, TimestampMixin):
    __tablename__ = "recurring_expenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(60))
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    # Plain string: a row with an unknown cadence must still load and prorate to 0.
    cadence: Mapped[str] = mapped_column(String(16), nullable=False)
    start_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[dt.date]] = mapped_column(Date)

    __table_args__ = (
        Index("ix_recurring_expenses_restaurant", "restaurant_id"),
        CheckConstraint("amount_cents >= 0", name="ck_recurring_expense_amount_positive"),
    )


class Ingredient(Base, TimestampMixin):
    __tablename__ = "ingredients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False, default="unit")
    cost_per_unit_cents: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint(
            "cost_per_unit_cents >= 0", name="ck_ingredient_cost_positive"
        ),
    )


class WasteRecord(Base, TimestampMixin):
    __tablename__ = "waste_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    ingredient_id: Mapped[Optional[int]] = mapped_column(ForeignKey("ingredients.id"))
    quantity: Mapped[Optional[float]] = mapped_column(Float)
    reason: Mapped[Optional[str]] = mapped_column(Text)
    cost_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    ingredient: Mapped[Optional["Ingredient"]] = relationship("Ingredient")

    __table_args__ = (
        Index("ix_waste_records_restaurant_date", "restaurant_id", "date"),
        CheckConstraint("cost_cents >= 0", name="ck_waste_cost_positive"),
    )


class ExpenseTransaction(Base, TimestampMixin):
    """One-time expense.

    ``kind`` tags the entry: a plain expense, a mirror of a waste record
    (``waste_record_id`` points at it) or a manual stock adjustment booked as
    cost of goods.
    """

    __tablename__ = "expense_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    category: Mapped[str] = mapped_column(
        String(60), nullable=False, default=OTHER_CATEGORY
    )
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    kind: Mapped[ExpenseEntryKind] = mapped_column(
        _value_enum(ExpenseEntryKind, "expenseentrykind"),
        nullable=False,
        default=ExpenseEntryKind.plain,
    )
    waste_record_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("waste_records.id")
    )

    waste_record: Mapped[Optional["WasteRecord"]] = relationship("WasteRecord")

    __table_args__ = (
        Index("ix_expense_transactions_restaurant_date", "restaurant_id", "date"),
        CheckConstraint("amount_cents >= 0", name="ck_expense_txn_amount_positive"),
        CheckConstraint(
            "(kind = 'waste_derived') = (waste_record_id IS NOT NULL)",
            name="ck_expense_txn_waste_link",
        ),
    )

    @property
    def is_waste_derived(self) -> bool:
        return self.kind == ExpenseEntryKind.waste_derived

    @property
    def is_cogs_adjustment(self) -> bool:
        return self.kind == ExpenseEntryKind.cogs_adjustment


class Payroll(Base, TimestampMixin):
    __tablename__ = "payrolls"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    employee_name: Mapped[Optional[str]] = mapped_column(String(120))
    period: Mapped[dt.date] = mapped_column(Date, nullable=False)
    paid_date: Mapped[Optional[dt.date]] = mapped_column(Date)
    total_paid_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[PayrollStatus] = mapped_column(
        _value_enum(PayrollStatus, "payrollstatus"),
        nullable=False,
        default=PayrollStatus.pending,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        Index("ix_payrolls_restaurant_status", "restaurant_id", "status"),
        CheckConstraint("total_paid_cents >= 0", name="ck_payroll_paid_positive"),
    )


class MenuItem(Base, TimestampMixin):
    __tablename__ = "menu_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(60))

    __table_args__ = (Index("ix_menu_items_restaurant", "restaurant_id"),)


class Sale(Base, TimestampMixin):
    __tablename__ = "sales"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    order_number: Mapped[Optional[str]] = mapped_column(String(40))
    timestamp: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)
    total_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[SaleStatus] = mapped_column(
        _value_enum(SaleStatus, "salestatus"),
        nullable=False,
        default=SaleStatus.pending,
    )

    items: Mapped[list["SaleItem"]] = relationship(
        "SaleItem", back_populates="sale", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_sales_restaurant_status_ts", "restaurant_id", "status", "timestamp"),
        CheckConstraint("total_cents >= 0", name="ck_sale_total_positive"),
    )


class SaleItem(Base):
    __tablename__ = "sale_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    sale_id: Mapped[int] = mapped_column(ForeignKey("sales.id"), nullable=False)
    menu_item_id: Mapped[Optional[int]] = mapped_column(ForeignKey("menu_items.id"))
    name: Mapped[Optional[str]] = mapped_column(String(120))
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # NULL means the dish has no costing yet.
    cost_cents: Mapped[Optional[int]] = mapped_column(Integer)

    sale: Mapped["Sale"] = relationship("Sale", back_populates="items")
    menu_item: Mapped[Optional["MenuItem"]] = relationship("MenuItem")

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_sale_item_quantity_positive"),
    )


class MealPrepSession(Base, TimestampMixin):
    __tablename__ = "meal_prep_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(Integer, nullable=False)
    prep_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    prepared_by: Mapped[Optional[str]] = mapped_column(String(120))

    usages: Mapped[list["IngredientUsage"]] = relationship(
        "IngredientUsage", back_populates="session", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_meal_prep_restaurant_date", "restaurant_id", "prep_date"),
    )


class IngredientUsage(Base):
    __tablename__ = "ingredient_usages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    session_id: Mapped[int] = mapped_column(
        ForeignKey("meal_prep_sessions.id"), nullable=False
    )
    ingredient_id: Mapped[int] = mapped_column(
        ForeignKey("ingredients.id"), nullable=False
    )
    quantity_used: Mapped[float] = mapped_column(Float, nullable=False)

    session: Mapped["MealPrepSession"] = relationship(
        "MealPrepSession", back_populates="usages"
    )
    ingredient: Mapped["Ingredient"] = relationship("Ingredient")

    __table_args__ = (
        CheckConstraint("quantity_used >= 0", name="ck_usage_quantity_positive"),
    )
