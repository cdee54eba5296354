"""
auth/store.py -- SQLAlchemy Core persistence layer for user records.

Pattern: Repository + Data Mapper.
UserStore is the repository; _row_to_user is the mapper. Service and route
code never touches SQL directly.

create_user() plays the role of a model pre-save hook: it validates the
fields and hashes the password, so callers hand over plaintext exactly once
and never see a half-written record. The UNIQUE constraint on email is the
only guard against duplicate accounts -- two concurrent registrations with
the same email race at the database, and the loser gets IntegrityError.

Security:
  All queries use bound parameters. No f-strings in SQL.

DB path: auth/pawpass_auth.db unless DATABASE_URL says otherwise.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, func, select
from sqlalchemy.engine import Engine

from auth.errors import RecordValidationError
from auth.models import User
from auth.tokens import hash_password

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(50), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)

# ---------------------------------------------------------------------------
# Validation rules
# ---------------------------------------------------------------------------

USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6
# bcrypt refuses input longer than this many bytes (UTF-8 encoded).
PASSWORD_MAX_BYTES = 72
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_user_fields(username: str, email: str, password: str) -> dict[str, str]:
    """Return {field: message} for every invalid field (empty dict when valid)."""
    errors: dict[str, str] = {}
    username = (username or "").strip()
    if not username:
        errors["username"] = "Username is required."
    elif len(username) > USERNAME_MAX_LENGTH:
        errors["username"] = f"Username must be at most {USERNAME_MAX_LENGTH} characters."
    if not email:
        errors["email"] = "Email address is required."
    elif not _EMAIL_RE.match(email):
        errors["email"] = "Please enter a valid email address."
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        errors["password"] = f"Password must be at least {PASSWORD_MIN_LENGTH} characters."
    elif len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        errors["password"] = f"Password must be at most {PASSWORD_MAX_BYTES} bytes."
    return errors


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode. Set per-connection; PRAGMAs are not inherited."""
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User records.

    Usage:
        store = UserStore("sqlite:///:memory:")
        user = store.create_user("rex", "rex@example.com", "s3cret!")
        store.get_by_email("rex@example.com")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def has_users(self) -> bool:
        """Return True if at least one user record exists."""
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_users)).scalar()
        return (result or 0) > 0

    def create_user(self, username: str, email: str, password: str) -> User:
        """Validate, hash, and insert a new user. Returns the stored record.

        Raises RecordValidationError if any field is invalid (nothing is
        written). Raises sqlalchemy.exc.IntegrityError if the email is taken.
        """
        errors = validate_user_fields(username, email, password)
        if errors:
            raise RecordValidationError(errors)

        user = User(
            username=username.strip(),
            email=email,
            hashed_password=hash_password(password),
            created_at=_now_iso(),
        )
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    username=user.username,
                    email=user.email,
                    hashed_password=user.hashed_password,
                    created_at=user.created_at,
                )
            )
            conn.commit()
            user.id = result.inserted_primary_key[0]
        return user

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        username=row.username,
        email=row.email,
        hashed_password=row.hashed_password,
        created_at=row.created_at,
    )
