"""Withdrawal ledger."""

from spinrewards.withdrawals.models import WithdrawalRequest, WithdrawalStatus
from spinrewards.withdrawals.service import WithdrawalService, withdrawal_service

__all__ = ["WithdrawalRequest", "WithdrawalStatus", "WithdrawalService", "withdrawal_service"]
