"""Tests for the spin ledger."""

import random
import threading
import time
from datetime import datetime

import pytest

from spinrewards.errors import NotFoundError, QuotaExceededError
from spinrewards.spins.service import SpinService, day_bounds

REWARD_VALUES = {5, 8, 10, 12, 15, 20, 25, 30, 40}


class _SlowRandom(random.Random):
    """Holds the spin transaction open between the quota check and the insert."""

    def choice(self, seq):
        time.sleep(0.3)
        return super().choice(seq)


class _StaleKeyLookupSpinService(SpinService):
    """Misses an existing keyed event once, as a request that lost the race would."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.stale_lookups = 1

    def _find_keyed_event(self, session, account_id, idempotency_key):
        if self.stale_lookups:
            self.stale_lookups -= 1
            return None
        return super()._find_keyed_event(session, account_id, idempotency_key)


class TestDayBounds:
    def test_utc_day(self):
        start, end = day_bounds(datetime(2026, 10, 18, 15, 30), "UTC")
        assert start == datetime(2026, 10, 18, 0, 0)
        assert end == datetime(2026, 10, 19, 0, 0)

    def test_local_day_differs_from_utc_day(self):
        # 02:00 UTC is still the previous evening in New York (EDT, UTC-4)
        start, end = day_bounds(datetime(2026, 10, 18, 2, 0), "America/New_York")
        assert start == datetime(2026, 10, 17, 4, 0)
        assert end == datetime(2026, 10, 18, 4, 0)

    def test_midnight_belongs_to_new_day(self):
        start, _ = day_bounds(datetime(2026, 10, 18, 0, 0), "UTC")
        assert start == datetime(2026, 10, 18, 0, 0)


class TestQuota:
    def test_count_tracks_spins(self, spins, make_account):
        account = make_account()
        assert spins.count_today(account.id) == 0

        for expected in range(1, 4):
            result = spins.spin(account.id)
            assert result.spins_today == expected
            assert spins.count_today(account.id) == expected

        assert spins.remaining_today(account.id) == (3, 7)

    def test_spin_past_limit_is_refused_without_side_effects(self, spins, accounts, make_account):
        account = make_account()
        for _ in range(10):
            spins.spin(account.id)
        balance = accounts.get_by_id(account.id).points

        with pytest.raises(QuotaExceededError) as exc_info:
            spins.spin(account.id)

        assert exc_info.value.limit == 10
        assert spins.count_today(account.id) == 10
        assert accounts.get_by_id(account.id).points == balance
        assert spins.remaining_today(account.id) == (10, 0)

    def test_count_resets_at_midnight(self, spins, clock, make_account):
        clock.now = datetime(2026, 10, 18, 23, 0)
        account = make_account()
        for _ in range(10):
            spins.spin(account.id)

        clock.advance(hours=1)

        assert spins.count_today(account.id) == 0
        assert spins.spin(account.id).event.amount == 50

    def test_quotas_are_per_account(self, spins, make_account):
        first = make_account()
        second = make_account()
        for _ in range(10):
            spins.spin(first.id)

        assert spins.spin(second.id).spins_today == 1

    def test_concurrent_spins_cannot_pass_the_limit(self, spins, clock, accounts, make_account):
        account = make_account()
        for _ in range(9):
            spins.spin(account.id)
        balance = accounts.get_by_id(account.id).points

        slow = SpinService(clock=clock, rng=_SlowRandom(3), tz_name="UTC")
        outcomes = []

        def spin_once():
            try:
                outcomes.append(slow.spin(account.id))
            except QuotaExceededError as e:
                outcomes.append(e)

        threads = [threading.Thread(target=spin_once) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        refused = [o for o in outcomes if isinstance(o, QuotaExceededError)]
        granted = [o for o in outcomes if not isinstance(o, QuotaExceededError)]
        assert len(refused) == 1
        assert len(granted) == 1
        assert spins.count_today(account.id) == 10
        assert accounts.get_by_id(account.id).points == balance + granted[0].event.amount

    def test_custom_limit(self, clock, make_account):
        service = SpinService(clock=clock, daily_limit=2, tz_name="UTC")
        account = make_account()
        service.spin(account.id)
        service.spin(account.id)

        with pytest.raises(QuotaExceededError):
            service.spin(account.id)


class TestRewards:
    def test_first_spin_of_day_pays_bonus(self, spins, make_account):
        account = make_account()
        result = spins.spin(account.id)

        assert result.event.amount == 50
        assert result.balance == 50

    def test_later_spins_draw_from_reward_set(self, spins, make_account):
        account = make_account()
        spins.spin(account.id)

        amounts = [spins.spin(account.id).event.amount for _ in range(9)]
        assert set(amounts) <= REWARD_VALUES

    def test_balance_equals_sum_of_rewards(self, spins, accounts, make_account):
        account = make_account(points=7)
        total = sum(spins.spin(account.id).event.amount for _ in range(5))

        assert accounts.get_by_id(account.id).points == 7 + total

    def test_draw_is_uniform_over_values(self):
        service = SpinService(rng=random.Random(42), reward_values=[5, 10])
        draws = [service.draw(spins_today=3) for _ in range(1000)]

        assert set(draws) == {5, 10}
        assert 400 < draws.count(5) < 600

    def test_unknown_account(self, spins):
        with pytest.raises(NotFoundError):
            spins.spin(999)


class TestIdempotency:
    def test_repeated_key_replays_original_spin(self, spins, accounts, make_account):
        account = make_account()
        first = spins.spin(account.id, idempotency_key="req-1")

        replay = spins.spin(account.id, idempotency_key="req-1")

        assert replay.replayed is True
        assert replay.event.id == first.event.id
        assert replay.balance == first.balance
        assert spins.count_today(account.id) == 1
        assert accounts.get_by_id(account.id).points == 50

    def test_distinct_keys_spin_again(self, spins, make_account):
        account = make_account()
        spins.spin(account.id, idempotency_key="req-1")
        result = spins.spin(account.id, idempotency_key="req-2")

        assert result.replayed is False
        assert result.spins_today == 2

    def test_replay_allowed_after_quota_is_used(self, spins, make_account):
        account = make_account()
        spins.spin(account.id, idempotency_key="first")
        for _ in range(9):
            spins.spin(account.id)

        assert spins.spin(account.id, idempotency_key="first").replayed is True

    def test_lost_insert_race_replays_the_winner(self, spins, clock, accounts, make_account):
        account = make_account()
        first = spins.spin(account.id, idempotency_key="retry-1")

        racer = _StaleKeyLookupSpinService(clock=clock, tz_name="UTC")
        result = racer.spin(account.id, idempotency_key="retry-1")

        assert result.replayed is True
        assert result.event.id == first.event.id
        assert result.balance == 50
        assert spins.count_today(account.id) == 1
        assert accounts.get_by_id(account.id).points == 50


class TestRecent:
    def test_newest_first_and_limited(self, spins, clock, make_account):
        account = make_account()
        ids = []
        for _ in range(5):
            ids.append(spins.spin(account.id).event.id)
            clock.advance(minutes=1)

        recent = spins.list_recent(account.id, limit=3)

        assert [e.id for e in recent] == list(reversed(ids))[:3]

    def test_only_own_spins(self, spins, make_account):
        mine = make_account()
        other = make_account()
        spins.spin(other.id)

        assert spins.list_recent(mine.id) == []
