"""
auth/service.py -- The credential service: register, login, logout, current user.

Every handler is stateless and request-scoped. The service holds two
read-only collaborators injected at construction:
  store     -- UserStore (lookups, inserts, password hashing on insert)
  settings  -- core.config.Settings (signing secret, cookie name and flags)

Outcomes:
  get_user / logout_user cannot fail and return their payload directly.
  register_user / login_user return Ok(UserPayload) or Err(ServiceError).
  ConfigurationError (no signing secret) is raised, never returned.

A token is issued only right after a user was created or password-verified.
No handler writes a cookie on a failure path.

Login messages:
  An unknown email and a wrong password produce different messages, which
  discloses whether an account exists. This is kept as-is pending an explicit
  product decision; the unknown-email branch still burns a bcrypt round so
  the two branches take the same time.

Logout:
  Tokens carry no expiry and there is no server-side session table, so
  logout only deletes the client's cookie. A copy of the token keeps working.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar, Union

from sqlalchemy.exc import SQLAlchemyError

from auth.context import AuthContext
from auth.errors import ConfigurationError, ErrorKind, RecordValidationError, ServiceError, normalize_error
from auth.models import User
from auth.tokens import burn_password_check, create_session_token

if TYPE_CHECKING:
    from auth.store import UserStore
    from core.config import Settings

logger = logging.getLogger("pawpass.auth")

T = TypeVar("T")

NOT_FOUND_MESSAGE = "No user found with that email address"
BAD_PASSWORD_MESSAGE = "Password is incorrect"
LOGOUT_MESSAGE = "Logged out successfully!"

_SAMESITE = "strict"


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: ServiceError


Result = Union[Ok[T], Err]


@dataclass(frozen=True)
class UserPayload:
    user: User | None


@dataclass(frozen=True)
class MessagePayload:
    message: str


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class CredentialService:
    def __init__(self, store: UserStore, settings: Settings) -> None:
        self._store = store
        self._settings = settings

    def create_token(self, user_id: int) -> str:
        """Sign a session token for user_id. Raises ConfigurationError without a secret."""
        return create_session_token(user_id, self._settings.secret_key)

    def get_user(self, context: AuthContext) -> UserPayload:
        return UserPayload(user=context.user)

    def register_user(self, username: str, email: str, password: str, context: AuthContext) -> Result[UserPayload]:
        """Create an account and start a session for it.

        The secret is checked first so a misconfigured deployment fails
        before a record is written, not after.
        """
        self._require_secret()
        try:
            user = self._store.create_user(username, email, password)
        except (RecordValidationError, SQLAlchemyError) as exc:
            error = normalize_error(exc)
            logger.info("Registration rejected (%s)", error.kind.value)
            return Err(error)

        self._start_session(user, context)
        logger.info("User registered (user_id=%s)", user.id)
        return Ok(UserPayload(user=user))

    def login_user(self, email: str, password: str, context: AuthContext) -> Result[UserPayload]:
        user = self._store.get_by_email(email)
        if user is None:
            burn_password_check(password)
            logger.info("Login failed: unknown email")
            return Err(ServiceError(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE))

        if not user.validate_password(password):
            logger.info("Login failed: bad password (user_id=%s)", user.id)
            return Err(ServiceError(ErrorKind.AUTHENTICATION, BAD_PASSWORD_MESSAGE))

        self._start_session(user, context)
        logger.info("User logged in (user_id=%s)", user.id)
        return Ok(UserPayload(user=user))

    def logout_user(self, context: AuthContext) -> MessagePayload:
        context.cookies.clear(
            self._settings.cookie_name,
            httponly=True,
            samesite=_SAMESITE,
            secure=self._settings.cookie_secure,
        )
        return MessagePayload(message=LOGOUT_MESSAGE)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_secret(self) -> None:
        if not self._settings.secret_key:
            logger.error("Refusing to register: SECRET_KEY is not configured")
            raise ConfigurationError("SECRET_KEY is not configured; session tokens cannot be signed.")

    def _start_session(self, user: User, context: AuthContext) -> None:
        # Token first: if signing fails, no cookie is written.
        token = self.create_token(user.id)
        context.cookies.set(
            self._settings.cookie_name,
            token,
            httponly=True,
            samesite=_SAMESITE,
            secure=self._settings.cookie_secure,
        )
