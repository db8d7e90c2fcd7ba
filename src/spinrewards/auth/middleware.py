"""Authentication dependencies for FastAPI."""

from fastapi import Request, Response

from spinrewards.accounts.models import Account
from spinrewards.auth.session import session_service
from spinrewards.errors import UnauthorizedError
from spinrewards.settings import settings


def get_session_token(request: Request) -> str | None:
    """Read the session cookie, if any."""
    return request.cookies.get(settings.session_cookie_name) or None


def require_auth(request: Request) -> Account:
    """Require a valid session cookie.

    Binds the resolved account to ``request.state.account`` for later use.

    Raises:
        UnauthorizedError: If no cookie is present
        InvalidCredentialError: If the cookie is invalid or the account is gone
    """
    token = get_session_token(request)
    if not token:
        raise UnauthorizedError()

    account = session_service.resolve(token)
    request.state.account = account
    return account


def set_session_cookie(response: Response, account: Account) -> None:
    """Issue a session token for an account as an HTTP-only cookie."""
    token = session_service.create_token(account)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=session_service.max_age_seconds,
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.session_cookie_name)
