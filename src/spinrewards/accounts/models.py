"""Account database model."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from spinrewards.storage.models import Base, utcnow


class Account(Base):
    """A registered user with a point balance and a referral code.

    Accounts are created on first sign-in and never deleted. ``points`` only
    changes through ``apply_balance_delta``; ``referred_by_id`` is written once,
    at creation.
    """

    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("points >= 0", name="ck_accounts_points_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Identity
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    external_id: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)  # Identity provider subject
    profile_pic: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    # Points
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Referrals
    referral_code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    referred_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("accounts.id"), nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, username={self.username}, points={self.points})>"
