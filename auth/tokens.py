"""
auth/tokens.py -- Session token signing, password hashing, and cookie helpers.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry user_id and iat only -- there is
       no exp claim, so a token stays valid for as long as the signing secret
       does. Logout clears the cookie but cannot revoke a token that was
       copied elsewhere. Verification returns None on any failure; the
       dependency layer treats that as anonymous.

  Secret: passed in by the caller (the credential service holds the injected
       Settings). An empty secret raises ConfigurationError before anything
       is signed.

  Passwords: bcrypt directly. _DUMMY_HASH lets the login path run bcrypt even
       when the email is unknown so response time does not reveal whether an
       account exists.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import bcrypt
from jose import JWTError, jwt

from auth.errors import ConfigurationError

logger = logging.getLogger("pawpass.auth")

_ALGORITHM = "HS256"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    bcrypt rejects input longer than 72 bytes with ValueError. UserStore
    validates both length bounds before calling this, so registration
    reports an over-long password as a field error.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash or over-long input.
        return False


# Computed once at module load so the first unknown-email login is not
# measurably slower than later ones.
_DUMMY_HASH: str = hash_password("pawpass_timing_dummy")


def burn_password_check(plain: str) -> None:
    """Run a bcrypt comparison whose result is discarded (timing equalization)."""
    verify_password(plain, _DUMMY_HASH)


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_session_token(user_id: int, secret_key: str) -> str:
    """Sign a session token asserting user_id.

    Raises ConfigurationError if secret_key is empty. This is a deployment
    defect, not something a client can cause or fix.
    """
    if not secret_key:
        logger.error("Refusing to issue a session token: SECRET_KEY is not configured")
        raise ConfigurationError("SECRET_KEY is not configured; session tokens cannot be signed.")
    payload = {
        "user_id": user_id,
        "iat": datetime.now(timezone.utc),
    }
    return jwt.encode(payload, secret_key, algorithm=_ALGORITHM)


def decode_session_token(token: str, secret_key: str) -> dict | None:
    """Verify a session token. Returns the payload dict or None on any failure."""
    if not token or not secret_key:
        return None
    try:
        payload = jwt.decode(token, secret_key, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if not isinstance(payload.get("user_id"), int):
        return None
    return payload
