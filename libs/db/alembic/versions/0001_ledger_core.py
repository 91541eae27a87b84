# ruff: noqa: I001
"""Ledger core tables: categories and transactions.

Revision ID: 0001_ledger_core
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_ledger_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "lg_categories",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("length(title) > 0", name="ck_lg_category_title"),
    )
    # Case-sensitive uniqueness; the resolver maps violations to a re-lookup.
    op.create_index("ix_lg_categories_title", "lg_categories", ["title"], unique=True)

    op.create_table(
        "lg_transactions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("value", sa.Numeric(18, 2), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column(
            "category_id",
            sa.String(36),
            sa.ForeignKey("lg_categories.id"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("value > 0", name="ck_lg_tx_value_positive"),
        sa.CheckConstraint("type in ('income','outcome')", name="ck_lg_tx_type"),
        sa.CheckConstraint("length(title) > 0", name="ck_lg_tx_title"),
    )
    op.create_index(
        "ix_lg_transactions_category_id",
        "lg_transactions",
        ["category_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_lg_transactions_category_id", table_name="lg_transactions")
    op.drop_table("lg_transactions")
    op.drop_index("ix_lg_categories_title", table_name="lg_categories")
    op.drop_table("lg_categories")
