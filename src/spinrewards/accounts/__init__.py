"""Account directory."""

from spinrewards.accounts.models import Account
from spinrewards.accounts.service import AccountService, account_service, apply_balance_delta

__all__ = ["Account", "AccountService", "account_service", "apply_balance_delta"]
