"""Spin API v1 endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Header, Query, Request

from spinrewards import notifications
from spinrewards.accounts.models import Account
from spinrewards.api.rate_limit import SPIN_LIMIT, limiter
from spinrewards.api.v1.schemas import CamelModel
from spinrewards.auth.middleware import require_auth
from spinrewards.notifications import Notice
from spinrewards.settings import settings
from spinrewards.spins.service import spin_service

router = APIRouter(prefix="/spins", tags=["spins"])


# ==================== MODELS ====================


class SpinEventResponse(CamelModel):
    id: int
    account_id: int
    amount: int
    created_at: datetime


class SpinCountResponse(CamelModel):
    count: int
    remaining: int
    limit: int


class SpinResponse(CamelModel):
    spin: SpinEventResponse
    points: int  # Balance after the spin
    spins_remaining: int
    replayed: bool = False
    notice: Notice


# ==================== ENDPOINTS ====================


@router.get("/count", response_model=SpinCountResponse)
async def get_spin_count(account: Account = Depends(require_auth)):
    """Get today's spin count and remaining quota."""
    count, remaining = spin_service.remaining_today(account.id)
    return SpinCountResponse(count=count, remaining=remaining, limit=spin_service.daily_limit)


@router.post("", response_model=SpinResponse)
@limiter.limit(SPIN_LIMIT)
async def spin(
    request: Request,
    account: Account = Depends(require_auth),
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key", max_length=100),
):
    """Spin the wheel.

    The first spin of the day pays a fixed bonus; later spins draw a random
    reward. Fails with 400 once the daily quota is used up. Send an
    ``Idempotency-Key`` header to make retries safe.
    """
    result = spin_service.spin(account.id, idempotency_key=idempotency_key)

    return SpinResponse(
        spin=SpinEventResponse.model_validate(result.event),
        points=result.balance,
        spins_remaining=result.remaining,
        replayed=result.replayed,
        notice=notifications.success(
            "You won!", f"You won {result.event.amount} points"
        ),
    )


@router.get("/recent", response_model=list[SpinEventResponse])
async def get_recent_spins(
    account: Account = Depends(require_auth),
    limit: int = Query(default=settings.recent_spins_limit, ge=1, le=50),
):
    """Get the newest spins of the current account, newest first."""
    events = spin_service.list_recent(account.id, limit=limit)
    return [SpinEventResponse.model_validate(e) for e in events]
