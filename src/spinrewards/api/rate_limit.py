"""Per-client request limits for the public API.

The limiter is shared by ``app.state`` and the route decorators. It only
enforces limits in production, so tests and local clients are never throttled.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from spinrewards.settings import settings

# Sign-in issues session cookies
SIGN_IN_LIMIT = "10/minute"
# Spins are capped per day anyway; this only blunts scripted retries
SPIN_LIMIT = "30/minute"
# Code validation is unauthenticated and reveals usernames
REFERRAL_CHECK_LIMIT = "20/minute"

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200/minute"],
    storage_uri="memory://",
    enabled=settings.env == "production",
)
