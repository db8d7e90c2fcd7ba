"""Account directory: identity lookups, creation, balance and profile updates."""

import secrets

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from spinrewards.accounts.models import Account
from spinrewards.errors import (
    InsufficientBalanceError,
    NotFoundError,
    RequestValidationFailed,
    UniquenessViolationError,
)
from spinrewards.logging_config import get_logger
from spinrewards.storage.db import Database, db
from spinrewards.storage.models import utcnow

logger = get_logger(__name__)

REFERRAL_CODE_LENGTH = 8


def _generate_unique_code(length: int = REFERRAL_CODE_LENGTH) -> str:
    """Generate a readable referral code.

    Uses uppercase letters and digits, avoiding confusing characters.
    Format: ABC12XYZ (8 chars by default)
    """
    # Exclude confusing characters: 0, O, I, l, 1
    alphabet = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
    return "".join(secrets.choice(alphabet) for _ in range(length))


def normalize_referral_code(code: str) -> str:
    return code.upper().strip()


def apply_balance_delta(session: Session, account_id: int, delta: int) -> int:
    """Add ``delta`` to an account balance in a single UPDATE statement.

    The addition is evaluated by the database, so concurrent callers cannot
    lose each other's updates. A negative delta only applies when the balance
    covers it.

    Args:
        session: Session whose transaction the update joins
        account_id: Account ID
        delta: Signed number of points

    Returns:
        Balance after the update

    Raises:
        NotFoundError: If the account does not exist
        InsufficientBalanceError: If a debit exceeds the balance
    """
    stmt = (
        update(Account)
        .where(Account.id == account_id)
        .values(points=Account.points + delta, updated_at=utcnow())
    )
    if delta < 0:
        stmt = stmt.where(Account.points >= -delta)

    result = session.execute(stmt.execution_options(synchronize_session="fetch"))

    if result.rowcount == 0:
        available = session.execute(
            select(Account.points).where(Account.id == account_id)
        ).scalar_one_or_none()
        if available is None:
            raise NotFoundError(f"Account {account_id} not found")
        raise InsufficientBalanceError(required=-delta, available=available)

    return session.execute(
        select(Account.points).where(Account.id == account_id)
    ).scalar_one()


class AccountService:
    """Service for looking up and mutating accounts.

    Lookups return ``None`` when nothing matches; absence is a normal outcome.
    Every method accepts an optional session so it can join a larger
    transaction (sign-up with referral, spins, withdrawals).
    """

    def __init__(self, database: Database | None = None):
        """Initialize account service."""
        self.db = database or db
        self.logger = get_logger(__name__)

    # ==================== LOOKUPS ====================

    def get_by_id(self, account_id: int, session: Session | None = None) -> Account | None:
        """Get account by ID."""
        with self.db.scope(session) as s:
            return s.get(Account, account_id)

    def get_by_email(self, email: str, session: Session | None = None) -> Account | None:
        """Get account by email (case-insensitive)."""
        with self.db.scope(session) as s:
            return s.scalars(
                select(Account).where(Account.email == email.lower().strip())
            ).first()

    def get_by_external_id(self, external_id: str, session: Session | None = None) -> Account | None:
        """Get account by identity-provider ID."""
        with self.db.scope(session) as s:
            return s.scalars(
                select(Account).where(Account.external_id == external_id)
            ).first()

    def get_by_username(self, username: str, session: Session | None = None) -> Account | None:
        """Get account by username."""
        with self.db.scope(session) as s:
            return s.scalars(
                select(Account).where(Account.username == username.strip())
            ).first()

    def get_by_referral_code(self, code: str, session: Session | None = None) -> Account | None:
        """Get the account owning a referral code.

        Args:
            code: Referral code (case and surrounding whitespace ignored)

        Returns:
            Account or None
        """
        if not code or not code.strip():
            return None

        with self.db.scope(session) as s:
            return s.scalars(
                select(Account).where(Account.referral_code == normalize_referral_code(code))
            ).first()

    # ==================== CREATION ====================

    def create(
        self,
        username: str,
        email: str,
        external_id: str | None = None,
        profile_pic: str | None = None,
        referred_by_id: int | None = None,
        session: Session | None = None,
    ) -> Account:
        """Create a new account with a zero balance and a fresh referral code.

        Args:
            username: Unique display name
            email: Unique email address
            external_id: Optional identity-provider ID
            profile_pic: Optional picture URL
            referred_by_id: ID of the referring account, if any

        Returns:
            Created account

        Raises:
            RequestValidationFailed: If the username is blank
            UniquenessViolationError: If username, email or external ID is taken
        """
        username = username.strip()
        email = email.lower().strip()
        if not username:
            raise RequestValidationFailed("Username cannot be empty")

        with self.db.scope(session) as s:
            if self.get_by_username(username, session=s):
                raise UniquenessViolationError("username")
            if self.get_by_email(email, session=s):
                raise UniquenessViolationError("email")
            if external_id and self.get_by_external_id(external_id, session=s):
                raise UniquenessViolationError("external id")

            code = self._new_referral_code(s)

            account = Account(
                username=username,
                email=email,
                external_id=external_id,
                profile_pic=profile_pic,
                points=0,
                referral_code=code,
                referred_by_id=referred_by_id,
            )
            s.add(account)
            try:
                s.flush()
            except IntegrityError as e:
                # Lost a race against a concurrent sign-up
                raise UniquenessViolationError("username or email") from e

            self.logger.info(
                "account_created",
                account_id=account.id,
                username=username,
                referred_by=referred_by_id,
            )
            return account

    def _new_referral_code(self, session: Session) -> str:
        code = _generate_unique_code()
        attempts = 0
        while attempts < 10:
            taken = session.scalars(
                select(Account.id).where(Account.referral_code == code)
            ).first()
            if taken is None:
                return code
            code = _generate_unique_code()
            attempts += 1
        raise UniquenessViolationError("referral code")

    # ==================== MUTATIONS ====================

    def adjust_balance(self, account_id: int, delta: int, session: Session | None = None) -> int:
        """Add a signed number of points to an account.

        Args:
            account_id: Account ID
            delta: Points to add (negative to deduct)

        Returns:
            New balance

        Raises:
            NotFoundError: If the account does not exist
            InsufficientBalanceError: If a deduction exceeds the balance
        """
        with self.db.scope(session) as s:
            new_balance = apply_balance_delta(s, account_id, delta)

        self.logger.info(
            "balance_adjusted",
            account_id=account_id,
            delta=delta,
            new_balance=new_balance,
        )
        return new_balance

    def update_profile(
        self,
        account_id: int,
        username: str | None = None,
        profile_pic: str | None = None,
    ) -> Account:
        """Update profile fields. ``None`` leaves a field unchanged.

        Raises:
            NotFoundError: If the account does not exist
            RequestValidationFailed: If the new username is blank
            UniquenessViolationError: If the new username is taken
        """
        with self.db.session(immediate=True) as session:
            account = session.get(Account, account_id)
            if not account:
                raise NotFoundError(f"Account {account_id} not found")

            if username is not None:
                username = username.strip()
                if not username:
                    raise RequestValidationFailed("Username cannot be empty")
                other = self.get_by_username(username, session=session)
                if other and other.id != account_id:
                    raise UniquenessViolationError("username")
                account.username = username
            if profile_pic is not None:
                account.profile_pic = profile_pic

            account.updated_at = utcnow()
            try:
                session.flush()
            except IntegrityError as e:
                raise UniquenessViolationError("username") from e
            session.refresh(account)

            self.logger.info("profile_updated", account_id=account_id)
            return account


# Singleton instance
account_service = AccountService()
