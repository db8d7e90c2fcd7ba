"""Sign-in flows that resolve or create accounts."""

from dataclasses import dataclass

from spinrewards.accounts.models import Account
from spinrewards.accounts.service import AccountService, account_service
from spinrewards.errors import NotFoundError
from spinrewards.logging_config import get_logger
from spinrewards.referral.service import ReferralService, referral_service
from spinrewards.storage.db import Database, db

logger = get_logger(__name__)


@dataclass
class SignInResult:
    account: Account
    created: bool


class SignInService:
    """Resolves identities to accounts, creating them on first sign-in."""

    def __init__(
        self,
        database: Database | None = None,
        accounts: AccountService | None = None,
        referrals: ReferralService | None = None,
    ):
        self.db = database or db
        self.accounts = accounts or account_service
        self.referrals = referrals or referral_service
        self.logger = get_logger(__name__)

    def sign_in_with_provider(
        self,
        external_id: str,
        email: str,
        username: str,
        profile_pic: str | None = None,
        referral_code: str | None = None,
    ) -> SignInResult:
        """Sign in with an identity-provider profile.

        An existing account is resumed only when the provider ID or the email
        matches. A username alone never resumes an account; a new profile whose
        username is taken is refused. Otherwise a new account is created, and
        if ``referral_code`` names an existing account the referral is recorded
        in the same transaction. Unknown referral codes are ignored.

        Args:
            external_id: Provider subject ID
            email: Email from the provider profile
            username: Requested username
            profile_pic: Optional picture URL
            referral_code: Optional referral code entered at signup

        Returns:
            SignInResult with the account and whether it was just created

        Raises:
            UniquenessViolationError: If the username (or, in a concurrent
                signup, another identity field) is already taken
        """
        with self.db.session(immediate=True) as session:
            account = (
                self.accounts.get_by_external_id(external_id, session=session)
                or self.accounts.get_by_email(email, session=session)
            )
            if account:
                self.logger.info("account_signed_in", account_id=account.id, method="provider")
                return SignInResult(account=account, created=False)

            referrer = None
            if referral_code:
                referrer = self.accounts.get_by_referral_code(referral_code, session=session)
                if not referrer:
                    self.logger.info("referral_code_unknown", referral_code=referral_code)

            account = self.accounts.create(
                username=username,
                email=email,
                external_id=external_id,
                profile_pic=profile_pic,
                referred_by_id=referrer.id if referrer else None,
                session=session,
            )

            if referrer:
                self.referrals.record_referral(
                    referrer_id=referrer.id,
                    referred_id=account.id,
                    session=session,
                )

        self.logger.info(
            "account_signed_up",
            account_id=account.id,
            referred_by=referrer.id if referrer else None,
        )
        return SignInResult(account=account, created=True)

    def sign_in_with_username_email(self, username: str, email: str) -> Account:
        """Sign in an existing account by its email, or username plus matching email.

        Raises:
            NotFoundError: If no account matches
        """
        with self.db.session() as session:
            account = self.accounts.get_by_email(email, session=session)

            if not account:
                candidate = self.accounts.get_by_username(username, session=session)
                if candidate and candidate.email == email.lower().strip():
                    account = candidate

            if not account:
                raise NotFoundError("User not found")

        self.logger.info("account_signed_in", account_id=account.id, method="username_email")
        return account


# Singleton instance
signin_service = SignInService()
