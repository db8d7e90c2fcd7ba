"""Response models shared by several routers."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel

from spinrewards.accounts.models import Account

# Surrounding whitespace is dropped before the length check
Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


class CamelModel(BaseModel):
    """Serializes with camelCase keys; accepts either case on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class AccountResponse(CamelModel):
    """Public account fields."""
    id: int
    username: str
    email: str
    profile_pic: str | None = None
    points: int
    referral_code: str

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls.model_validate(account)
