"""Session credentials: signed, time-limited tokens bound to an account."""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from spinrewards.accounts.models import Account
from spinrewards.accounts.service import AccountService, account_service
from spinrewards.errors import InvalidCredentialError
from spinrewards.logging_config import get_logger
from spinrewards.settings import settings

logger = get_logger(__name__)


class SessionService:
    """Issues and validates session tokens (HS256 JWTs)."""

    def __init__(
        self,
        accounts: AccountService | None = None,
        secret_key: str | None = None,
        algorithm: str | None = None,
        expire_days: int | None = None,
    ):
        """Initialize session service."""
        self.accounts = accounts or account_service
        self.secret_key = secret_key or settings.jwt_secret_key
        self.algorithm = algorithm or settings.jwt_algorithm
        self.expire_days = expire_days if expire_days is not None else settings.session_expire_days
        self.logger = get_logger(__name__)

    @property
    def max_age_seconds(self) -> int:
        return self.expire_days * 24 * 3600

    def create_token(
        self,
        account: Account,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create a session token for an account.

        Args:
            account: Account to bind
            expires_delta: Optional lifetime (defaults to the session length)

        Returns:
            JWT token string
        """
        if expires_delta is None:
            expires_delta = timedelta(days=self.expire_days)

        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(account.id),
            "exp": now + expires_delta,
            "iat": now,
        }

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> dict[str, Any] | None:
        """Verify and decode a session token.

        Args:
            token: JWT token string

        Returns:
            Token payload or None if the signature or expiry check fails
        """
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            self.logger.debug("token_verification_failed", error=str(e))
            return None

    def resolve(self, token: str) -> Account:
        """Resolve the account a session token is bound to.

        Raises:
            InvalidCredentialError: If the token is invalid or the account is gone
        """
        payload = self.verify_token(token)
        if not payload:
            raise InvalidCredentialError("Invalid token")

        subject = payload.get("sub")
        if not subject or not str(subject).isdigit():
            raise InvalidCredentialError("Invalid token")

        account = self.accounts.get_by_id(int(subject))
        if not account:
            self.logger.info("token_account_missing", account_id=subject)
            raise InvalidCredentialError("User not found")

        return account


# Singleton instance
session_service = SessionService()
