"""Tests for withdrawal requests."""

import pytest

from spinrewards.errors import (
    BelowMinimumError,
    InsufficientBalanceError,
    NotFoundError,
    RequestValidationFailed,
)
from spinrewards.withdrawals.models import WithdrawalStatus
from spinrewards.withdrawals.service import MAX_WITHDRAWAL_POINTS


class TestRequestWithdrawal:
    def test_below_minimum_is_refused_regardless_of_balance(self, withdrawals, accounts, make_account):
        account = make_account(points=50_000)

        with pytest.raises(BelowMinimumError) as exc_info:
            withdrawals.request_withdrawal(account.id, 999, "binance-uid-1")

        assert exc_info.value.minimum == 1000
        assert accounts.get_by_id(account.id).points == 50_000
        assert withdrawals.list_for_account(account.id) == []

    def test_overdraw_then_valid_request(self, withdrawals, accounts, make_account):
        account = make_account(points=5000)

        with pytest.raises(InsufficientBalanceError):
            withdrawals.request_withdrawal(account.id, 6000, "binance-uid-1")
        assert accounts.get_by_id(account.id).points == 5000
        assert withdrawals.list_for_account(account.id) == []

        request = withdrawals.request_withdrawal(account.id, 1000, "binance-uid-1")

        assert request.status == WithdrawalStatus.PENDING.value
        assert request.amount == 1000
        assert accounts.get_by_id(account.id).points == 4000
        assert [w.id for w in withdrawals.list_for_account(account.id)] == [request.id]

    def test_entire_balance_can_be_withdrawn(self, withdrawals, accounts, make_account):
        account = make_account(points=1000)
        withdrawals.request_withdrawal(account.id, 1000, "binance-uid-1")
        assert accounts.get_by_id(account.id).points == 0

    @pytest.mark.parametrize("destination", ["", "   ", "abcd"])
    def test_short_destination_is_refused(self, withdrawals, accounts, make_account, destination):
        account = make_account(points=5000)

        with pytest.raises(RequestValidationFailed):
            withdrawals.request_withdrawal(account.id, 1000, destination)
        assert accounts.get_by_id(account.id).points == 5000

    def test_destination_is_trimmed(self, withdrawals, make_account):
        account = make_account(points=5000)
        request = withdrawals.request_withdrawal(account.id, 1000, "  uid-12345  ")
        assert request.destination == "uid-12345"

    def test_unknown_account(self, withdrawals):
        with pytest.raises(NotFoundError):
            withdrawals.request_withdrawal(999, 1000, "binance-uid-1")

    def test_amount_beyond_column_range_is_refused(self, withdrawals, accounts, make_account):
        account = make_account(points=5000)

        with pytest.raises(RequestValidationFailed):
            withdrawals.request_withdrawal(account.id, MAX_WITHDRAWAL_POINTS + 1, "uid-12345")

        assert accounts.get_by_id(account.id).points == 5000
        assert withdrawals.list_for_account(account.id) == []


class TestListing:
    def test_account_requests_oldest_first(self, withdrawals, make_account):
        account = make_account(points=3000)
        other = make_account(points=3000)
        first = withdrawals.request_withdrawal(account.id, 1000, "dest-one")
        second = withdrawals.request_withdrawal(account.id, 1500, "dest-two")
        withdrawals.request_withdrawal(other.id, 1000, "dest-other")

        assert [w.id for w in withdrawals.list_for_account(account.id)] == [first.id, second.id]

    def test_list_by_status(self, withdrawals, make_account):
        account = make_account(points=3000)
        withdrawals.request_withdrawal(account.id, 1000, "dest-one")

        assert len(withdrawals.list_by_status(WithdrawalStatus.PENDING)) == 1
        assert withdrawals.list_by_status(WithdrawalStatus.COMPLETED) == []
        assert len(withdrawals.list_by_status()) == 1


class TestUsdValue:
    @pytest.mark.parametrize(
        "points, usd",
        [(1000, 0.10), (5000, 0.50), (1234, 0.12), (0, 0.0)],
    )
    def test_conversion(self, withdrawals, points, usd):
        assert withdrawals.usd_value(points) == pytest.approx(usd)
