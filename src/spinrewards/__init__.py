"""Spin rewards service: daily spins, points ledger, referrals and withdrawals."""

__version__ = "0.1.0"
