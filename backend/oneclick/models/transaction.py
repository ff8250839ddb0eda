"""Transaction ORM — a single authorized charge made against an inscription.

Invariants:
    - buy_order is unique (idempotency key for charges)
    - Rows are written once on authorization success and never updated

Design Decisions:
    - No FK to inscriptions: transactions must survive inscription removal and
      the store is treated as a document store (no joins)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from oneclick.db.base import Base


class Transaction(Base):
    """Authorized charge as reported by the gateway."""
    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    buy_order: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True,
    )
    commerce_code: Mapped[str] = mapped_column(String(32), nullable=False)
    inscription_id: Mapped[str] = mapped_column(
        String(36), nullable=False, index=True,
    )
    user_id: Mapped[str] = mapped_column(String(24), nullable=False, index=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    shares: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    auth_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    response_code: Mapped[int | None] = mapped_column(Integer, nullable=True)
    payment_type: Mapped[str | None] = mapped_column(String(8), nullable=True)
    status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    card_digits: Mapped[str | None] = mapped_column(String(4), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
