"""Shared fixtures.

The database URL must be set before the package is imported, because the
settings and the global Database are created at import time.
"""

import os
import random
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

_TMP_DIR = tempfile.mkdtemp(prefix="spinrewards-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_TMP_DIR) / 'test.db'}"
os.environ["ENV"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-0123456789abcdef0123456789"

import pytest  # noqa: E402

from spinrewards.accounts.service import AccountService  # noqa: E402
from spinrewards.referral.service import ReferralService  # noqa: E402
from spinrewards.spins.service import SpinService  # noqa: E402
from spinrewards.storage.db import db  # noqa: E402
from spinrewards.withdrawals.service import WithdrawalService  # noqa: E402


class FakeClock:
    """Controllable naive-UTC clock."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(autouse=True)
def database():
    """Fresh tables for every test."""
    db.create_tables()
    yield db
    db.drop_tables()


@pytest.fixture
def accounts() -> AccountService:
    return AccountService()


@pytest.fixture
def referrals() -> ReferralService:
    return ReferralService()


@pytest.fixture
def withdrawals() -> WithdrawalService:
    return WithdrawalService()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 18, 12, 0, 0))


@pytest.fixture
def spins(clock) -> SpinService:
    return SpinService(clock=clock, rng=random.Random(1234), tz_name="UTC")


@pytest.fixture
def make_account(accounts):
    """Factory creating accounts with unique identity fields."""
    counter = {"n": 0}

    def _make(username: str | None = None, points: int = 0, **kwargs):
        counter["n"] += 1
        n = counter["n"]
        username = username or f"player{n}"
        account = accounts.create(
            username=username,
            email=kwargs.pop("email", f"{username}@example.com"),
            external_id=kwargs.pop("external_id", f"google-{n}"),
            **kwargs,
        )
        if points:
            accounts.adjust_balance(account.id, points)
            account = accounts.get_by_id(account.id)
        return account

    return _make
