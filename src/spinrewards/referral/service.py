"""Referral service for recording signups and listing referred accounts."""

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from spinrewards.accounts.models import Account
from spinrewards.accounts.service import apply_balance_delta
from spinrewards.logging_config import get_logger
from spinrewards.referral.models import ReferralRecord
from spinrewards.settings import settings
from spinrewards.storage.db import Database, db

logger = get_logger(__name__)


@dataclass
class ReferralListing:
    """A referral record with the referred account's public profile.

    ``referred`` is None when the referred account cannot be found.
    """
    record: ReferralRecord
    referred: Account | None


class ReferralService:
    """Service for the referral ledger."""

    def __init__(self, database: Database | None = None, bonus: int | None = None):
        """Initialize referral service."""
        self.db = database or db
        self.bonus = bonus if bonus is not None else settings.referral_bonus
        self.logger = get_logger(__name__)

    def record_referral(
        self,
        referrer_id: int,
        referred_id: int,
        session: Session | None = None,
    ) -> ReferralRecord:
        """Record a successful referral signup and credit the referrer.

        Called once while the referred account is being created; pass that
        transaction's session so the account, the record and the bonus commit
        together.

        Args:
            referrer_id: ID of the account whose code was used
            referred_id: ID of the new account

        Returns:
            Referral record
        """
        with self.db.scope(session) as s:
            record = ReferralRecord(
                referrer_id=referrer_id,
                referred_id=referred_id,
                points=self.bonus,
            )
            s.add(record)
            s.flush()

            new_balance = apply_balance_delta(s, referrer_id, self.bonus)

        self.logger.info(
            "referral_recorded",
            referrer_id=referrer_id,
            referred_id=referred_id,
            bonus=self.bonus,
            referrer_balance=new_balance,
        )
        return record

    def list_for_referrer(self, account_id: int) -> list[ReferralListing]:
        """Get every referral made by an account, oldest first.

        Args:
            account_id: Referrer's account ID

        Returns:
            Listings enriched with the referred account
        """
        with self.db.session() as session:
            records = session.scalars(
                select(ReferralRecord)
                .where(ReferralRecord.referrer_id == account_id)
                .order_by(ReferralRecord.created_at, ReferralRecord.id)
            ).all()

            referred_ids = [r.referred_id for r in records]
            accounts = {}
            if referred_ids:
                accounts = {
                    a.id: a
                    for a in session.scalars(
                        select(Account).where(Account.id.in_(referred_ids))
                    )
                }

            return [
                ReferralListing(record=r, referred=accounts.get(r.referred_id))
                for r in records
            ]

    def count_for_referrer(self, account_id: int) -> int:
        """Number of accounts referred by an account."""
        with self.db.session() as session:
            return session.execute(
                select(func.count(ReferralRecord.id)).where(
                    ReferralRecord.referrer_id == account_id
                )
            ).scalar_one()

    def get_referrer_for_account(self, account_id: int) -> int | None:
        """Get the referrer ID for an account.

        Args:
            account_id: Account ID to check

        Returns:
            Referrer's account ID or None
        """
        with self.db.session() as session:
            record = session.scalars(
                select(ReferralRecord).where(ReferralRecord.referred_id == account_id)
            ).first()

            return record.referrer_id if record else None


# Singleton instance
referral_service = ReferralService()
