"""Inscription ORM — one-click payment credential registered for a user.

Invariants:
    - id is a UUID string primary key (generated client-side)
    - status transitions: pending -> success | failed, success -> removed
    - At most one row with status='success' per user_id (partial unique index)
    - card_digits holds only the trailing 4 characters of the card number

Design Decisions:
    - Partial unique index enforces the single-active-credential invariant in the
      database; the orchestrator's count() check is only a fast path
    - JSON column for client metadata: parsed user-agent shape varies per browser
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from oneclick.db.base import Base

_ACTIVE_ONLY = text("status = 'success'")


class Inscription(Base):
    """Inscription record — created pending, finished by the gateway callback."""
    __tablename__ = "inscriptions"
    __table_args__ = (
        Index(
            "uq_inscriptions_user_active", "user_id",
            unique=True,
            postgresql_where=_ACTIVE_ONLY,
            sqlite_where=_ACTIVE_ONLY,
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    user_id: Mapped[str] = mapped_column(String(24), nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending",
    )
    token: Mapped[str | None] = mapped_column(String(255), nullable=True)
    auth_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    card_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    card_digits: Mapped[str | None] = mapped_column(String(4), nullable=True)
    client: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    removed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
