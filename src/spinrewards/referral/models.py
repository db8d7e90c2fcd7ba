"""Referral ledger database model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from spinrewards.storage.models import Base, utcnow


class ReferralRecord(Base):
    """Individual referral record.

    Links the account whose code was used to the account that signed up with
    it. Each account is referred at most once, hence the unique ``referred_id``.
    """
    __tablename__ = "referral_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    referrer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id"), nullable=False, index=True
    )
    referred_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id"), nullable=False, unique=True
    )

    # Bonus credited to the referrer
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=200)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<ReferralRecord(referrer={self.referrer_id}, referred={self.referred_id})>"
