"""Split customer names: add first_name / last_name.

Revision ID: 002_customer_name_columns
Revises: 001_initial
Create Date: 2026-03-14

Values are filled in afterwards with ``detail-crm db migrate-customer-names``.
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "002_customer_name_columns"
down_revision: Union[str, Sequence[str], None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

NAME_COLUMNS = ("first_name", "last_name")


def _columns(bind, table_name: str) -> set[str]:
    return {col["name"] for col in sa.inspect(bind).get_columns(table_name)}


def upgrade() -> None:
    existing = _columns(op.get_bind(), "customers")
    for column in NAME_COLUMNS:
        if column not in existing:
            op.add_column("customers", sa.Column(column, sa.String(length=100), nullable=True))


def downgrade() -> None:
    existing = _columns(op.get_bind(), "customers")
    with op.batch_alter_table("customers") as batch_op:
        for column in reversed(NAME_COLUMNS):
            if column in existing:
                batch_op.drop_column(column)
