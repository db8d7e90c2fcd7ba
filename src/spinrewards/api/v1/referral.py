"""Referral API v1 endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Request

from spinrewards.accounts.models import Account
from spinrewards.accounts.service import account_service
from spinrewards.api.rate_limit import REFERRAL_CHECK_LIMIT, limiter
from spinrewards.api.v1.schemas import CamelModel
from spinrewards.auth.middleware import require_auth
from spinrewards.logging_config import get_logger
from spinrewards.referral.service import referral_service

logger = get_logger(__name__)

router = APIRouter(prefix="/referrals", tags=["referrals"])


# ==================== MODELS ====================


class ReferredAccount(CamelModel):
    """Public profile of a referred account."""
    id: int
    username: str
    profile_pic: str | None = None


class ReferralResponse(CamelModel):
    id: int
    referrer_id: int
    referred_id: int
    points: int
    created_at: datetime
    referred_user: ReferredAccount | None = None


class ReferralCountResponse(CamelModel):
    count: int


class ValidateCodeRequest(CamelModel):
    """Request to validate a referral code."""
    code: str


class ValidateCodeResponse(CamelModel):
    """Response from code validation."""
    valid: bool
    referrer_name: str | None = None
    bonus_points: int = 0


# ==================== ENDPOINTS ====================


@router.get("", response_model=list[ReferralResponse])
async def list_referrals(account: Account = Depends(require_auth)):
    """List accounts referred by the current account."""
    listings = referral_service.list_for_referrer(account.id)

    return [
        ReferralResponse(
            id=item.record.id,
            referrer_id=item.record.referrer_id,
            referred_id=item.record.referred_id,
            points=item.record.points,
            created_at=item.record.created_at,
            referred_user=ReferredAccount.model_validate(item.referred) if item.referred else None,
        )
        for item in listings
    ]


@router.get("/count", response_model=ReferralCountResponse)
async def count_referrals(account: Account = Depends(require_auth)):
    """Number of accounts referred by the current account."""
    return ReferralCountResponse(count=referral_service.count_for_referrer(account.id))


@router.post("/validate", response_model=ValidateCodeResponse)
@limiter.limit(REFERRAL_CHECK_LIMIT)
async def validate_referral_code(request: Request, body: ValidateCodeRequest):
    """Validate a referral code.

    Used on the signup form to check a code and greet the referrer by name.
    """
    referrer = account_service.get_by_referral_code(body.code)

    if not referrer:
        return ValidateCodeResponse(valid=False)

    return ValidateCodeResponse(
        valid=True,
        referrer_name=referrer.username,
        bonus_points=referral_service.bonus,
    )
