"""Authentication API v1 endpoints."""

from fastapi import APIRouter, Depends, Request, Response
from pydantic import EmailStr, Field

from spinrewards import notifications
from spinrewards.accounts.models import Account
from spinrewards.api.rate_limit import SIGN_IN_LIMIT, limiter
from spinrewards.api.v1.schemas import AccountResponse, CamelModel, Username
from spinrewards.auth.middleware import clear_session_cookie, require_auth, set_session_cookie
from spinrewards.auth.signin import signin_service
from spinrewards.logging_config import get_logger
from spinrewards.notifications import Notice

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# ==================== MODELS ====================


class ProviderSignInRequest(CamelModel):
    """Sign-in with an identity-provider profile."""
    google_id: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    username: Username
    profile_pic: str | None = Field(default=None, max_length=1024)
    referral_code: str | None = Field(default=None, max_length=20)  # Optional referral code


class LoginRequest(CamelModel):
    """Sign-in with username and email."""
    username: Username
    email: EmailStr


class AuthResponse(CamelModel):
    """Signed-in account; the session itself travels in the cookie."""
    user: AccountResponse
    created: bool = False
    notice: Notice


# ==================== ENDPOINTS ====================


@router.post("/google", response_model=AuthResponse)
@limiter.limit(SIGN_IN_LIMIT)
async def sign_in_with_provider(request: Request, response: Response, body: ProviderSignInRequest):
    """Sign in or sign up with an identity-provider profile.

    Creates the account on first sign-in. A valid referral code credits the
    referrer's signup bonus.
    """
    result = signin_service.sign_in_with_provider(
        external_id=body.google_id,
        email=body.email,
        username=body.username,
        profile_pic=body.profile_pic,
        referral_code=body.referral_code,
    )
    set_session_cookie(response, result.account)

    if result.created:
        notice = notifications.success("Welcome!", "Your account has been created")
    else:
        notice = notifications.success("Welcome back!", "Logged in successfully")

    return AuthResponse(
        user=AccountResponse.from_account(result.account),
        created=result.created,
        notice=notice,
    )


@router.post("/login", response_model=AuthResponse)
@limiter.limit(SIGN_IN_LIMIT)
async def login(request: Request, response: Response, body: LoginRequest):
    """Sign in an existing account by username and email."""
    account = signin_service.sign_in_with_username_email(body.username, body.email)
    set_session_cookie(response, account)

    return AuthResponse(
        user=AccountResponse.from_account(account),
        created=False,
        notice=notifications.success("Welcome back!", "Logged in successfully"),
    )


@router.post("/logout")
async def logout(request: Request, response: Response):
    """Clear the session cookie."""
    clear_session_cookie(response)
    logger.info("account_signed_out", client=request.client.host if request.client else None)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=AccountResponse)
async def get_current_account(account: Account = Depends(require_auth)):
    """Get current account information."""
    return AccountResponse.from_account(account)
