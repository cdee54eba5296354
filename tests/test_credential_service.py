"""Unit tests for auth/service.py -- CredentialService handlers.

Runs the service against a real in-memory UserStore and a recording cookie
writer, so every assertion about cookies is about what the handler actually
asked the transport to do.

Covers:
- registerUser: success issues a decodable token; duplicates and invalid
  fields fail without a cookie or a record
- loginUser: exact not-found / bad-password messages, no cookie on failure,
  token payload matches the identity on success
- getUser: anonymous returns user=None, authenticated returns the identity
- logoutUser: always clears, always the same message
- missing signing secret fails before any cookie (and before any record)
"""

from __future__ import annotations

import pytest

from auth.context import AuthContext
from auth.errors import ConfigurationError, ErrorKind
from auth.service import (
    BAD_PASSWORD_MESSAGE,
    LOGOUT_MESSAGE,
    NOT_FOUND_MESSAGE,
    CredentialService,
    Err,
    MessagePayload,
    Ok,
    UserPayload,
)
from auth.store import UserStore
from auth.tokens import decode_session_token
from core.config import Settings

from conftest import TEST_SECRET, RecordingCookies


def _register(service: CredentialService, cookies: RecordingCookies, email: str = "rex@example.com"):
    return service.register_user("rex", email, "woofwoof1", AuthContext(cookies=cookies))


class TestRegisterUser:
    def test_success_returns_user_and_sets_cookie(self, service: CredentialService, cookies: RecordingCookies) -> None:
        result = _register(service, cookies)

        assert isinstance(result, Ok)
        user = result.value.user
        assert user.id is not None
        assert user.email == "rex@example.com"
        assert len(cookies.set_calls) == 1
        call = cookies.set_calls[0]
        assert call["name"] == "pet_token"
        assert call["httponly"] is True
        assert call["samesite"] == "strict"
        assert call["secure"] is False

    def test_token_decodes_to_new_user_id(self, service: CredentialService, cookies: RecordingCookies) -> None:
        result = _register(service, cookies)
        payload = decode_session_token(cookies.set_calls[0]["value"], TEST_SECRET)
        assert payload["user_id"] == result.value.user.id

    def test_duplicate_email_is_conflict_without_cookie(
        self, service: CredentialService, store: UserStore, cookies: RecordingCookies
    ) -> None:
        store.create_user("first", "rex@example.com", "original1")

        result = _register(service, cookies)

        assert isinstance(result, Err)
        assert result.error.kind is ErrorKind.CONFLICT
        assert "already exists" in result.error.message
        assert cookies.set_calls == []

    def test_invalid_email_is_validation_error(
        self, service: CredentialService, store: UserStore, cookies: RecordingCookies
    ) -> None:
        result = _register(service, cookies, email="not-an-email")

        assert isinstance(result, Err)
        assert result.error.kind is ErrorKind.VALIDATION
        assert result.error.message == "Please enter a valid email address."
        assert cookies.set_calls == []
        assert store.has_users() is False

    def test_cookie_secure_follows_deployment_signal(self, store: UserStore, cookies: RecordingCookies) -> None:
        deployed = Settings(debug=True, secret_key=TEST_SECRET, port=8080)
        _register(CredentialService(store, deployed), cookies)
        assert cookies.set_calls[0]["secure"] is True


class TestLoginUser:
    @pytest.fixture(autouse=True)
    def _seed(self, store: UserStore) -> None:
        self.user = store.create_user("rex", "rex@example.com", "woofwoof1")

    def test_unknown_email(self, service: CredentialService, cookies: RecordingCookies) -> None:
        result = service.login_user("nobody@example.com", "woofwoof1", AuthContext(cookies=cookies))

        assert isinstance(result, Err)
        assert result.error.kind is ErrorKind.NOT_FOUND
        assert result.error.message == NOT_FOUND_MESSAGE == "No user found with that email address"
        assert cookies.set_calls == []

    def test_wrong_password(self, service: CredentialService, cookies: RecordingCookies) -> None:
        result = service.login_user("rex@example.com", "meowmeow1", AuthContext(cookies=cookies))

        assert isinstance(result, Err)
        assert result.error.kind is ErrorKind.AUTHENTICATION
        assert result.error.message == BAD_PASSWORD_MESSAGE == "Password is incorrect"
        assert cookies.set_calls == []

    def test_email_match_is_exact(self, service: CredentialService, cookies: RecordingCookies) -> None:
        result = service.login_user("Rex@Example.com", "woofwoof1", AuthContext(cookies=cookies))
        assert isinstance(result, Err)
        assert result.error.kind is ErrorKind.NOT_FOUND

    def test_success_sets_cookie_for_same_identity(self, service: CredentialService, cookies: RecordingCookies) -> None:
        result = service.login_user("rex@example.com", "woofwoof1", AuthContext(cookies=cookies))

        assert isinstance(result, Ok)
        assert result.value.user.id == self.user.id
        assert len(cookies.set_calls) == 1
        payload = decode_session_token(cookies.set_calls[0]["value"], TEST_SECRET)
        assert payload["user_id"] == self.user.id


class TestGetUser:
    def test_anonymous_returns_none(self, service: CredentialService, cookies: RecordingCookies) -> None:
        assert service.get_user(AuthContext(cookies=cookies)) == UserPayload(user=None)

    def test_authenticated_returns_identity(
        self, service: CredentialService, store: UserStore, cookies: RecordingCookies
    ) -> None:
        user = store.create_user("rex", "rex@example.com", "woofwoof1")
        payload = service.get_user(AuthContext(cookies=cookies, user=user))
        assert payload.user is user
        assert cookies.set_calls == [] and cookies.clear_calls == []


class TestLogoutUser:
    def test_anonymous_logout_still_clears(self, service: CredentialService, cookies: RecordingCookies) -> None:
        result = service.logout_user(AuthContext(cookies=cookies))

        assert result == MessagePayload(message=LOGOUT_MESSAGE)
        assert result.message == "Logged out successfully!"
        assert [c["name"] for c in cookies.clear_calls] == ["pet_token"]

    def test_authenticated_logout_clears(
        self, service: CredentialService, store: UserStore, cookies: RecordingCookies
    ) -> None:
        user = store.create_user("rex", "rex@example.com", "woofwoof1")
        result = service.logout_user(AuthContext(cookies=cookies, user=user))
        assert result.message == LOGOUT_MESSAGE
        assert len(cookies.clear_calls) == 1

    def test_logout_does_not_revoke_issued_token(self, service: CredentialService, cookies: RecordingCookies) -> None:
        """No server-side session table: the token outlives the cookie."""
        user = _register(service, cookies).value.user
        token = cookies.set_calls[0]["value"]

        service.logout_user(AuthContext(cookies=cookies, user=user))

        assert decode_session_token(token, TEST_SECRET)["user_id"] == user.id


class TestMissingSecret:
    @pytest.fixture
    def unconfigured(self, store: UserStore) -> CredentialService:
        return CredentialService(store, Settings.model_construct(secret_key=""))

    def test_create_token_fails(self, unconfigured: CredentialService) -> None:
        with pytest.raises(ConfigurationError):
            unconfigured.create_token(1)

    def test_register_fails_before_cookie_and_record(
        self, unconfigured: CredentialService, store: UserStore, cookies: RecordingCookies
    ) -> None:
        with pytest.raises(ConfigurationError):
            _register(unconfigured, cookies)
        assert cookies.set_calls == []
        assert store.has_users() is False

    def test_login_fails_before_cookie(
        self, unconfigured: CredentialService, store: UserStore, cookies: RecordingCookies
    ) -> None:
        store.create_user("rex", "rex@example.com", "woofwoof1")
        with pytest.raises(ConfigurationError):
            unconfigured.login_user("rex@example.com", "woofwoof1", AuthContext(cookies=cookies))
        assert cookies.set_calls == []

    def test_logout_and_get_user_unaffected(self, unconfigured: CredentialService, cookies: RecordingCookies) -> None:
        assert unconfigured.get_user(AuthContext(cookies=cookies)).user is None
        assert unconfigured.logout_user(AuthContext(cookies=cookies)).message == LOGOUT_MESSAGE
