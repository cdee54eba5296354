"""
auth/models.py -- Domain dataclasses for authentication entities.

Dataclasses own domain shape; UserStore and CredentialService do the work.
The one piece of behavior here is User.validate_password(), which keeps the
hash comparison next to the hash so callers never handle hashed_password.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from auth.tokens import verify_password


@dataclass
class User:
    """A persisted identity.

    id is None before the record is written to the database.
    hashed_password is excluded from repr so it never ends up in logs.
    """

    username: str
    email: str
    hashed_password: str = field(repr=False)
    id: int | None = None
    created_at: str = ""  # ISO 8601, set by store on insert

    def validate_password(self, candidate: str) -> bool:
        """Return True if candidate matches this user's stored password."""
        return verify_password(candidate, self.hashed_password)
