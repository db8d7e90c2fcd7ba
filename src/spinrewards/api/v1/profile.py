"""Profile API v1 endpoints."""

from fastapi import APIRouter, Depends
from pydantic import Field

from spinrewards import notifications
from spinrewards.accounts.models import Account
from spinrewards.accounts.service import account_service
from spinrewards.api.v1.schemas import AccountResponse, CamelModel, Username
from spinrewards.auth.middleware import require_auth
from spinrewards.errors import RequestValidationFailed
from spinrewards.notifications import Notice

router = APIRouter(prefix="/profile", tags=["profile"])


class UpdateProfileRequest(CamelModel):
    """Update profile request."""
    username: Username | None = None
    profile_pic: str | None = Field(default=None, max_length=1024)


class ProfileUpdatedResponse(AccountResponse):
    notice: Notice


@router.patch("", response_model=ProfileUpdatedResponse)
async def update_profile(body: UpdateProfileRequest, account: Account = Depends(require_auth)):
    """Update username and/or profile picture."""
    if not body.username and not body.profile_pic:
        raise RequestValidationFailed("No updates provided")

    updated = account_service.update_profile(
        account.id,
        username=body.username,
        profile_pic=body.profile_pic,
    )
    return ProfileUpdatedResponse(
        **AccountResponse.from_account(updated).model_dump(),
        notice=notifications.success("Profile Updated", "Your changes have been saved"),
    )
