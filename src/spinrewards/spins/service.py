"""Spin ledger: daily quota, reward draw and point grants."""

import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable
from zoneinfo import ZoneInfo

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from spinrewards.accounts.models import Account
from spinrewards.accounts.service import apply_balance_delta
from spinrewards.errors import NotFoundError, QuotaExceededError
from spinrewards.logging_config import get_logger
from spinrewards.settings import settings
from spinrewards.spins.models import SpinEvent
from spinrewards.storage.db import Database, db
from spinrewards.storage.models import utcnow

logger = get_logger(__name__)


def day_bounds(now: datetime, tz_name: str) -> tuple[datetime, datetime]:
    """Return the calendar day containing ``now`` as a naive-UTC half-open range.

    Args:
        now: Naive UTC timestamp
        tz_name: IANA zone whose midnight starts the day

    Returns:
        (start, end) such that start <= now < end
    """
    zone = ZoneInfo(tz_name)
    local = now.replace(tzinfo=timezone.utc).astimezone(zone)
    start_local = local.replace(hour=0, minute=0, second=0, microsecond=0)
    end_local = start_local + timedelta(days=1)

    def _to_utc(value: datetime) -> datetime:
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    return _to_utc(start_local), _to_utc(end_local)


@dataclass
class SpinResult:
    """Outcome of a spin request."""
    event: SpinEvent
    balance: int
    spins_today: int
    remaining: int
    replayed: bool = False


class SpinService:
    """Service for performing spins and reading the spin ledger.

    Rules:
    - At most ``daily_limit`` spins per account per calendar day
    - The first spin of a day grants ``first_spin_bonus`` points
    - Later spins grant a uniform draw from ``reward_values``
    """

    def __init__(
        self,
        database: Database | None = None,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
        daily_limit: int | None = None,
        first_spin_bonus: int | None = None,
        reward_values: list[int] | None = None,
        tz_name: str | None = None,
    ):
        """Initialize spin service.

        Args:
            database: Database to use (defaults to the global one)
            clock: Returns the current naive-UTC time
            rng: Random source for the reward draw
            daily_limit: Spins allowed per day
            first_spin_bonus: Reward for the first spin of a day
            reward_values: Rewards drawn for every later spin
            tz_name: Zone whose midnight starts a new day
        """
        self.db = database or db
        self.clock = clock or utcnow
        self.rng = rng or random.SystemRandom()
        self.daily_limit = daily_limit if daily_limit is not None else settings.daily_spin_limit
        self.first_spin_bonus = (
            first_spin_bonus if first_spin_bonus is not None else settings.first_spin_bonus
        )
        self.reward_values = list(reward_values or settings.spin_reward_values)
        self.tz_name = tz_name or settings.day_timezone
        self.logger = get_logger(__name__)

    # ==================== QUOTA ====================

    def _count_between(
        self,
        session: Session,
        account_id: int,
        start: datetime,
        end: datetime,
    ) -> int:
        return session.execute(
            select(func.count(SpinEvent.id)).where(
                SpinEvent.account_id == account_id,
                SpinEvent.created_at >= start,
                SpinEvent.created_at < end,
            )
        ).scalar_one()

    def count_today(self, account_id: int, session: Session | None = None) -> int:
        """Number of spins the account made since local midnight."""
        start, end = day_bounds(self.clock(), self.tz_name)
        with self.db.scope(session) as s:
            return self._count_between(s, account_id, start, end)

    def remaining_today(self, account_id: int) -> tuple[int, int]:
        """Return (spins used today, spins left today)."""
        count = self.count_today(account_id)
        return count, max(0, self.daily_limit - count)

    def draw(self, spins_today: int) -> int:
        """Pick the reward for the next spin given how many were made today."""
        if spins_today == 0:
            return self.first_spin_bonus
        return self.rng.choice(self.reward_values)

    # ==================== SPIN ====================

    def _find_keyed_event(
        self,
        session: Session,
        account_id: int,
        idempotency_key: str,
    ) -> SpinEvent | None:
        return session.scalars(
            select(SpinEvent).where(
                SpinEvent.account_id == account_id,
                SpinEvent.idempotency_key == idempotency_key,
            )
        ).first()

    def _replay(
        self,
        session: Session,
        event: SpinEvent,
        start: datetime,
        end: datetime,
    ) -> SpinResult:
        balance = session.execute(
            select(Account.points).where(Account.id == event.account_id)
        ).scalar_one()
        count = self._count_between(session, event.account_id, start, end)
        self.logger.info("spin_replayed", account_id=event.account_id, spin_id=event.id)
        return SpinResult(
            event=event,
            balance=balance,
            spins_today=count,
            remaining=max(0, self.daily_limit - count),
            replayed=True,
        )

    def spin(self, account_id: int, idempotency_key: str | None = None) -> SpinResult:
        """Perform one spin for an account.

        The quota check, event append and balance grant share one transaction
        that holds the write lock (``BEGIN IMMEDIATE`` on SQLite, the account
        row lock elsewhere), so concurrent spins cannot exceed the daily limit.

        Args:
            account_id: Account ID
            idempotency_key: Optional client key; a repeated key returns the
                original event without granting points again

        Returns:
            SpinResult with the event, new balance and remaining quota

        Raises:
            NotFoundError: If the account does not exist
            QuotaExceededError: If the daily limit is reached
        """
        now = self.clock()
        start, end = day_bounds(now, self.tz_name)

        try:
            with self.db.session(immediate=True) as session:
                # SELECT FOR UPDATE serializes spins of the same account
                account = session.scalars(
                    select(Account).where(Account.id == account_id).with_for_update()
                ).first()
                if not account:
                    raise NotFoundError(f"Account {account_id} not found")

                if idempotency_key:
                    existing = self._find_keyed_event(session, account_id, idempotency_key)
                    if existing:
                        return self._replay(session, existing, start, end)

                count = self._count_between(session, account_id, start, end)
                if count >= self.daily_limit:
                    self.logger.info(
                        "spin_quota_exceeded",
                        account_id=account_id,
                        spins_today=count,
                        limit=self.daily_limit,
                    )
                    raise QuotaExceededError(self.daily_limit)

                amount = self.draw(count)

                event = SpinEvent(
                    account_id=account_id,
                    amount=amount,
                    idempotency_key=idempotency_key,
                    created_at=now,
                )
                session.add(event)
                session.flush()

                balance = apply_balance_delta(session, account_id, amount)
        except IntegrityError:
            if not idempotency_key:
                raise
            # Another request with the same key committed first
            with self.db.session() as session:
                existing = self._find_keyed_event(session, account_id, idempotency_key)
                if not existing:
                    raise
                return self._replay(session, existing, start, end)

        spins_today = count + 1
        self.logger.info(
            "spin_recorded",
            account_id=account_id,
            spin_id=event.id,
            amount=amount,
            first_of_day=count == 0,
            new_balance=balance,
            remaining=self.daily_limit - spins_today,
        )

        return SpinResult(
            event=event,
            balance=balance,
            spins_today=spins_today,
            remaining=self.daily_limit - spins_today,
        )

    # ==================== HISTORY ====================

    def list_recent(self, account_id: int, limit: int = 10) -> list[SpinEvent]:
        """Get the newest spins of an account, newest first.

        Args:
            account_id: Account ID
            limit: Max records

        Returns:
            List of spin events
        """
        with self.db.session() as session:
            return list(
                session.scalars(
                    select(SpinEvent)
                    .where(SpinEvent.account_id == account_id)
                    .order_by(SpinEvent.created_at.desc(), SpinEvent.id.desc())
                    .limit(limit)
                )
            )


# Singleton instance
spin_service = SpinService()
