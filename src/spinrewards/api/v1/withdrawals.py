"""Withdrawal API v1 endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, Field

from spinrewards import notifications
from spinrewards.accounts.models import Account
from spinrewards.api.v1.schemas import CamelModel
from spinrewards.auth.middleware import require_auth
from spinrewards.notifications import Notice
from spinrewards.withdrawals.models import WithdrawalRequest
from spinrewards.withdrawals.service import MAX_WITHDRAWAL_POINTS, withdrawal_service

router = APIRouter(prefix="/withdrawals", tags=["withdrawals"])


# ==================== MODELS ====================


class WithdrawalCreate(CamelModel):
    """Withdrawal request body.

    ``destination`` may also be sent as ``binanceUid``.
    """
    amount: int = Field(..., le=MAX_WITHDRAWAL_POINTS)
    destination: str = Field(
        ...,
        max_length=255,
        validation_alias=AliasChoices("destination", "binanceUid"),
    )


class WithdrawalResponse(CamelModel):
    id: int
    account_id: int
    amount: int
    destination: str
    status: str
    created_at: datetime
    usd_value: float

    @classmethod
    def from_request(cls, withdrawal: WithdrawalRequest) -> "WithdrawalResponse":
        return cls(
            id=withdrawal.id,
            account_id=withdrawal.account_id,
            amount=withdrawal.amount,
            destination=withdrawal.destination,
            status=withdrawal.status,
            created_at=withdrawal.created_at,
            usd_value=withdrawal_service.usd_value(withdrawal.amount),
        )


class WithdrawalCreatedResponse(WithdrawalResponse):
    notice: Notice


# ==================== ENDPOINTS ====================


@router.post("", response_model=WithdrawalCreatedResponse)
async def request_withdrawal(body: WithdrawalCreate, account: Account = Depends(require_auth)):
    """Request a payout of points.

    Requires at least the minimum amount and a sufficient balance. The request
    starts as pending and is processed by the back office.
    """
    withdrawal = withdrawal_service.request_withdrawal(
        account_id=account.id,
        amount=body.amount,
        destination=body.destination,
    )

    created = WithdrawalResponse.from_request(withdrawal)
    return WithdrawalCreatedResponse(
        **created.model_dump(),
        notice=notifications.success(
            "Withdrawal Requested", "Your request will be processed within 24 hours"
        ),
    )


@router.get("", response_model=list[WithdrawalResponse])
async def list_withdrawals(account: Account = Depends(require_auth)):
    """Get the current account's withdrawal history, oldest first."""
    return [
        WithdrawalResponse.from_request(w)
        for w in withdrawal_service.list_for_account(account.id)
    ]
