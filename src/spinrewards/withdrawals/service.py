"""Withdrawal service: payout requests against the point balance."""

from sqlalchemy import select

from spinrewards.accounts.service import apply_balance_delta
from spinrewards.errors import BelowMinimumError, InsufficientBalanceError, RequestValidationFailed
from spinrewards.logging_config import get_logger
from spinrewards.settings import settings
from spinrewards.storage.db import Database, db
from spinrewards.withdrawals.models import WithdrawalRequest, WithdrawalStatus

logger = get_logger(__name__)

MIN_DESTINATION_LENGTH = 5
# Largest amount the INTEGER points column can hold
MAX_WITHDRAWAL_POINTS = 2**31 - 1


class WithdrawalService:
    """Service for creating and listing withdrawal requests.

    Requests start as pending; moving them to a terminal state is done by the
    back office, never here.
    """

    def __init__(self, database: Database | None = None, minimum: int | None = None):
        """Initialize withdrawal service."""
        self.db = database or db
        self.minimum = minimum if minimum is not None else settings.min_withdrawal_points
        self.logger = get_logger(__name__)

    def usd_value(self, points: int) -> float:
        """Display value of a number of points in USD."""
        return round(points / 1000 * settings.usd_per_thousand_points, 2)

    def request_withdrawal(
        self,
        account_id: int,
        amount: int,
        destination: str,
    ) -> WithdrawalRequest:
        """Request a payout of points.

        The balance check and the deduction are one conditional UPDATE, so two
        concurrent requests cannot both spend the same points.

        Args:
            account_id: Account ID
            amount: Points to withdraw
            destination: External payment-account handle

        Returns:
            Pending withdrawal request

        Raises:
            BelowMinimumError: If amount is under the minimum
            RequestValidationFailed: If the amount is out of range or the
                destination is unusable
            InsufficientBalanceError: If the balance does not cover amount
        """
        if amount < self.minimum:
            self.logger.info(
                "withdrawal_below_minimum",
                account_id=account_id,
                amount=amount,
                minimum=self.minimum,
            )
            raise BelowMinimumError(amount, self.minimum)
        if amount > MAX_WITHDRAWAL_POINTS:
            raise RequestValidationFailed(
                f"Withdrawal amount cannot exceed {MAX_WITHDRAWAL_POINTS} points"
            )

        destination = (destination or "").strip()
        if len(destination) < MIN_DESTINATION_LENGTH:
            raise RequestValidationFailed("Please enter a valid destination account")

        try:
            with self.db.session(immediate=True) as session:
                new_balance = apply_balance_delta(session, account_id, -amount)

                withdrawal = WithdrawalRequest(
                    account_id=account_id,
                    amount=amount,
                    destination=destination,
                    status=WithdrawalStatus.PENDING.value,
                )
                session.add(withdrawal)
                session.flush()
        except InsufficientBalanceError as e:
            self.logger.info(
                "withdrawal_insufficient_balance",
                account_id=account_id,
                amount=amount,
                available=e.available,
            )
            raise

        self.logger.info(
            "withdrawal_requested",
            account_id=account_id,
            withdrawal_id=withdrawal.id,
            amount=amount,
            new_balance=new_balance,
        )
        return withdrawal

    def list_for_account(self, account_id: int) -> list[WithdrawalRequest]:
        """Get an account's withdrawal requests, oldest first."""
        with self.db.session() as session:
            return list(
                session.scalars(
                    select(WithdrawalRequest)
                    .where(WithdrawalRequest.account_id == account_id)
                    .order_by(WithdrawalRequest.created_at, WithdrawalRequest.id)
                )
            )

    def list_by_status(self, status: WithdrawalStatus | None = None, limit: int = 100) -> list[WithdrawalRequest]:
        """Get requests across all accounts, oldest first (back-office view)."""
        with self.db.session() as session:
            stmt = select(WithdrawalRequest)
            if status is not None:
                stmt = stmt.where(WithdrawalRequest.status == status.value)
            return list(
                session.scalars(
                    stmt.order_by(WithdrawalRequest.created_at, WithdrawalRequest.id).limit(limit)
                )
            )


# Singleton instance
withdrawal_service = WithdrawalService()
