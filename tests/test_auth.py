"""Tests for session tokens and sign-in flows."""

from datetime import timedelta

import pytest
from jose import jwt

from spinrewards.auth.session import SessionService
from spinrewards.auth.signin import SignInService
from spinrewards.errors import InvalidCredentialError, NotFoundError, UniquenessViolationError


@pytest.fixture
def sessions(accounts) -> SessionService:
    return SessionService(accounts=accounts)


class TestSessionTokens:
    def test_token_resolves_to_its_account(self, sessions, make_account):
        account = make_account()
        token = sessions.create_token(account)

        assert sessions.verify_token(token)["sub"] == str(account.id)
        assert sessions.resolve(token).id == account.id

    def test_expired_token_is_rejected(self, sessions, make_account):
        token = sessions.create_token(make_account(), expires_delta=timedelta(seconds=-5))

        assert sessions.verify_token(token) is None
        with pytest.raises(InvalidCredentialError):
            sessions.resolve(token)

    def test_token_signed_with_other_key_is_rejected(self, sessions, make_account):
        forged = SessionService(secret_key="another-secret").create_token(make_account())

        with pytest.raises(InvalidCredentialError):
            sessions.resolve(forged)

    def test_garbage_token_is_rejected(self, sessions):
        with pytest.raises(InvalidCredentialError):
            sessions.resolve("not-a-jwt")

    def test_token_for_missing_account_is_rejected(self, sessions, make_account):
        token = sessions.create_token(make_account())
        payload = sessions.verify_token(token)
        payload["sub"] = "9999"
        orphan = jwt.encode(payload, sessions.secret_key, algorithm=sessions.algorithm)

        with pytest.raises(InvalidCredentialError) as exc_info:
            sessions.resolve(orphan)
        assert exc_info.value.message == "User not found"

    def test_non_numeric_subject_is_rejected(self, sessions):
        token = jwt.encode({"sub": "alice"}, sessions.secret_key, algorithm=sessions.algorithm)

        with pytest.raises(InvalidCredentialError):
            sessions.resolve(token)

    def test_max_age_matches_lifetime(self):
        assert SessionService(expire_days=7).max_age_seconds == 604800


class TestProviderSignIn:
    def test_first_sign_in_creates_account(self, accounts):
        result = SignInService().sign_in_with_provider(
            external_id="g-100",
            email="Hana@Example.com",
            username="hana",
            profile_pic="https://img.example.com/h.png",
        )

        assert result.created is True
        assert result.account.points == 0
        assert accounts.get_by_external_id("g-100").email == "hana@example.com"

    @pytest.mark.parametrize(
        "identity",
        [
            {"external_id": "g-100", "email": "x@example.com", "username": "x"},
            {"external_id": "g-other", "email": "hana@example.com", "username": "x"},
        ],
    )
    def test_existing_account_is_matched(self, identity):
        service = SignInService()
        original = service.sign_in_with_provider(
            external_id="g-100", email="hana@example.com", username="hana"
        ).account

        result = service.sign_in_with_provider(**identity)

        assert result.created is False
        assert result.account.id == original.id

    def test_username_alone_does_not_resume_an_account(self, accounts):
        service = SignInService()
        owner = service.sign_in_with_provider(
            external_id="g-100", email="hana@example.com", username="hana"
        ).account

        with pytest.raises(UniquenessViolationError) as exc_info:
            service.sign_in_with_provider(
                external_id="g-stranger", email="stranger@example.org", username="hana"
            )

        assert exc_info.value.field == "username"
        assert accounts.get_by_external_id("g-stranger") is None
        assert accounts.get_by_email("stranger@example.org") is None
        assert accounts.get_by_id(owner.id).external_id == "g-100"


class TestUsernameEmailSignIn:
    def test_matches_by_email(self, make_account):
        account = make_account(username="ivan")
        assert SignInService().sign_in_with_username_email("whatever", "IVAN@example.com").id == account.id

    def test_username_requires_matching_email(self, make_account):
        make_account(username="jane")

        with pytest.raises(NotFoundError):
            SignInService().sign_in_with_username_email("jane", "impostor@example.com")

    def test_unknown_account(self):
        with pytest.raises(NotFoundError):
            SignInService().sign_in_with_username_email("ghost", "ghost@example.com")
