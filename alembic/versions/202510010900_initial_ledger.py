"""initial ledger schema

Revision ID: 202510010900
Revises:
Create Date: 2025-10-01 09:00:00.000000

"""

from alembic import op
import sqlalchemy as sa


revision = "202510010900"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade():
    op.create_table(
        "recurring_expenses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("category", sa.String(length=60)),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("cadence", sa.String(length=16), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date()),
        *_timestamps(),
        sa.CheckConstraint(
            "amount_cents >= 0", name="ck_recurring_expense_amount_positive"
        ),
    )
    op.create_index(
        "ix_recurring_expenses_restaurant", "recurring_expenses", ["restaurant_id"]
    )

    op.create_table(
        "ingredients",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("unit", sa.String(length=20), nullable=False),
        sa.Column("cost_per_unit_cents", sa.Float(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "cost_per_unit_cents >= 0", name="ck_ingredient_cost_positive"
        ),
    )

    op.create_table(
        "waste_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("ingredient_id", sa.Integer(), sa.ForeignKey("ingredients.id")),
        sa.Column("quantity", sa.Float()),
        sa.Column("reason", sa.Text()),
        sa.Column("cost_cents", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("cost_cents >= 0", name="ck_waste_cost_positive"),
    )
    op.create_index(
        "ix_waste_records_restaurant_date",
        "waste_records",
        ["restaurant_id", "date"],
    )

    op.create_table(
        "expense_transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("category", sa.String(length=60), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column(
            "kind",
            sa.Enum(
                "plain", "waste_derived", "cogs_adjustment", name="expenseentrykind"
            ),
            nullable=False,
            server_default="plain",
        ),
        sa.Column(
            "waste_record_id", sa.Integer(), sa.ForeignKey("waste_records.id")
        ),
        *_timestamps(),
        sa.CheckConstraint(
            "amount_cents >= 0", name="ck_expense_txn_amount_positive"
        ),
        sa.CheckConstraint(
            "(kind = 'waste_derived') = (waste_record_id IS NOT NULL)",
            name="ck_expense_txn_waste_link",
        ),
    )
    op.create_index(
        "ix_expense_transactions_restaurant_date",
        "expense_transactions",
        ["restaurant_id", "date"],
    )

    op.create_table(
        "payrolls",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("employee_name", sa.String(length=120)),
        sa.Column("period", sa.Date(), nullable=False),
        sa.Column("paid_date", sa.Date()),
        sa.Column("total_paid_cents", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("PENDING", "PAID", name="payrollstatus"),
            nullable=False,
        ),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
        sa.CheckConstraint(
            "total_paid_cents >= 0", name="ck_payroll_paid_positive"
        ),
    )
    op.create_index(
        "ix_payrolls_restaurant_status", "payrolls", ["restaurant_id", "status"]
    )

    op.create_table(
        "sales",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("order_number", sa.String(length=40)),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.Column("total_cents", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("PENDING", "COMPLETED", "CANCELLED", name="salestatus"),
            nullable=False,
        ),
        *_timestamps(),
        sa.CheckConstraint("total_cents >= 0", name="ck_sale_total_positive"),
    )
    op.create_index(
        "ix_sales_restaurant_status_ts",
        "sales",
        ["restaurant_id", "status", "timestamp"],
    )

    op.create_table(
        "sale_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "sale_id", sa.Integer(), sa.ForeignKey("sales.id"), nullable=False
        ),
        sa.Column("name", sa.String(length=120)),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("price_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("cost_cents", sa.Integer()),
        sa.CheckConstraint("quantity >= 0", name="ck_sale_item_quantity_positive"),
    )

    op.create_table(
        "meal_prep_sessions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("prep_date", sa.Date(), nullable=False),
        sa.Column("prepared_by", sa.String(length=120)),
        *_timestamps(),
    )
    op.create_index(
        "ix_meal_prep_restaurant_date",
        "meal_prep_sessions",
        ["restaurant_id", "prep_date"],
    )

    op.create_table(
        "ingredient_usages",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "session_id",
            sa.Integer(),
            sa.ForeignKey("meal_prep_sessions.id"),
            nullable=False,
        ),
        sa.Column(
            "ingredient_id",
            sa.Integer(),
            sa.ForeignKey("ingredients.id"),
            nullable=False,
        ),
        sa.Column("quantity_used", sa.Float(), nullable=False),
        sa.CheckConstraint("quantity_used >= 0", name="ck_usage_quantity_positive"),
    )


def downgrade():
    op.drop_table("ingredient_usages")
    op.drop_index("ix_meal_prep_restaurant_date", table_name="meal_prep_sessions")
    op.drop_table("meal_prep_sessions")
    op.drop_table("sale_items")
    op.drop_index("ix_sales_restaurant_status_ts", table_name="sales")
    op.drop_table("sales")
    op.drop_index("ix_payrolls_restaurant_status", table_name="payrolls")
    op.drop_table("payrolls")
    op.drop_index(
        "ix_expense_transactions_restaurant_date", table_name="expense_transactions"
    )
    op.drop_table("expense_transactions")
    op.drop_index("ix_waste_records_restaurant_date", table_name="waste_records")
    op.drop_table("waste_records")
    op.drop_table("ingredients")
    op.drop_index("ix_recurring_expenses_restaurant", table_name="recurring_expenses")
    op.drop_table("recurring_expenses")
