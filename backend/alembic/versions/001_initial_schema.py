"""Initial schema — inscriptions and transactions with their uniqueness indexes.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

uq_inscriptions_user_active is partial (status = 'success'): a user may keep any
number of pending/failed/removed inscriptions but only one active credential.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_ACTIVE_ONLY = sa.text("status = 'success'")


def upgrade() -> None:
    op.create_table(
        "inscriptions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(24), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("token", sa.String(255), nullable=True),
        sa.Column("auth_code", sa.String(64), nullable=True),
        sa.Column("card_type", sa.String(32), nullable=True),
        sa.Column("card_digits", sa.String(4), nullable=True),
        sa.Column("client", sa.JSON, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("removed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_inscriptions_user_id", "inscriptions", ["user_id"])
    op.create_index(
        "uq_inscriptions_user_active", "inscriptions", ["user_id"],
        unique=True,
        postgresql_where=_ACTIVE_ONLY,
        sqlite_where=_ACTIVE_ONLY,
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("buy_order", sa.String(64), nullable=False, unique=True),
        sa.Column("commerce_code", sa.String(32), nullable=False),
        sa.Column("inscription_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(24), nullable=False),
        sa.Column("amount", sa.Integer, nullable=False),
        sa.Column("shares", sa.Integer, nullable=False, server_default="1"),
        sa.Column("auth_code", sa.String(64), nullable=True),
        sa.Column("response_code", sa.Integer, nullable=True),
        sa.Column("payment_type", sa.String(8), nullable=True),
        sa.Column("status", sa.String(32), nullable=True),
        sa.Column("card_digits", sa.String(4), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_transactions_inscription_id", "transactions", ["inscription_id"])
    op.create_index("ix_transactions_user_id", "transactions", ["user_id"])


def downgrade() -> None:
    op.drop_table("transactions")
    op.drop_table("inscriptions")
