"""Spin ledger database model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from spinrewards.storage.models import Base, utcnow


class SpinEvent(Base):
    """One granted spin. Append-only: rows are never updated or deleted."""

    __tablename__ = "spin_events"
    __table_args__ = (
        Index("ix_spin_events_account_created", "account_id", "created_at"),
        UniqueConstraint("account_id", "idempotency_key", name="uq_spin_events_account_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(Integer, ForeignKey("accounts.id"), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)

    # Client-supplied key so a retried request does not spin twice
    idempotency_key: Mapped[str | None] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<SpinEvent(id={self.id}, account={self.account_id}, amount={self.amount})>"
