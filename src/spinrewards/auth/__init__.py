"""Session/identity gate: cookie-borne JWT sessions and sign-in flows."""

from spinrewards.auth.middleware import clear_session_cookie, require_auth, set_session_cookie
from spinrewards.auth.session import SessionService, session_service
from spinrewards.auth.signin import SignInResult, SignInService, signin_service

__all__ = [
    "SessionService",
    "SignInResult",
    "SignInService",
    "clear_session_cookie",
    "require_auth",
    "session_service",
    "set_session_cookie",
    "signin_service",
]
