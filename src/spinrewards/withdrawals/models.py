"""Withdrawal ledger database model."""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from spinrewards.storage.models import Base, utcnow


class WithdrawalStatus(str, Enum):
    """Disposition of a payout request."""
    PENDING = "pending"        # Set on creation, the only state this service writes
    COMPLETED = "completed"    # Paid out by back office
    REJECTED = "rejected"      # Refused by back office


class WithdrawalRequest(Base):
    """A request to pay out points to an external payment account."""
    __tablename__ = "withdrawal_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id"), nullable=False, index=True
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)

    # External payment-account handle (e.g. exchange UID)
    destination: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=WithdrawalStatus.PENDING.value
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<WithdrawalRequest(id={self.id}, account={self.account_id}, amount={self.amount}, status={self.status})>"
