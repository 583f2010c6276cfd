"""add menu items and link sale items to them

Revision ID: 202510151200
Revises: 202510010900
Create Date: 2025-10-15 12:00:00.000000

"""

from alembic import op
import sqlalchemy as sa


revision = "202510151200"
down_revision = "202510010900"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "menu_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("category", sa.String(length=60)),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_menu_items_restaurant", "menu_items", ["restaurant_id"])

    with op.batch_alter_table("sale_items") as batch_op:
        batch_op.add_column(sa.Column("menu_item_id", sa.Integer(), nullable=True))
        batch_op.create_foreign_key(
            "fk_sale_items_menu_item_id", "menu_items", ["menu_item_id"], ["id"]
        )


def downgrade() -> None:
    with op.batch_alter_table("sale_items") as batch_op:
        batch_op.drop_constraint("fk_sale_items_menu_item_id", type_="foreignkey")
        batch_op.drop_column("menu_item_id")
    op.drop_index("ix_menu_items_restaurant", table_name="menu_items")
    op.drop_table("menu_items")
