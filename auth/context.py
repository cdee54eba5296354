"""
auth/context.py -- Typed request context handed to every credential handler.

AuthContext carries what the service may see of the request: the identity an
upstream dependency already resolved from the session token (or None), and a
CookieWriter for response-side cookie changes. The service never touches
Starlette objects directly; ResponseCookies is the adapter the HTTP layer
passes in, and tests pass a recording fake.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from auth.models import User


class CookieWriter(Protocol):
    def set(self, name: str, value: str, *, httponly: bool, samesite: str, secure: bool) -> None: ...

    def clear(self, name: str, *, httponly: bool, samesite: str, secure: bool) -> None: ...


@dataclass
class AuthContext:
    cookies: CookieWriter
    user: User | None = None


class ResponseCookies:
    """CookieWriter backed by a Starlette/FastAPI Response."""

    def __init__(self, response) -> None:
        self._response = response

    def set(self, name: str, value: str, *, httponly: bool, samesite: str, secure: bool) -> None:
        # No max_age: the token has no expiry, so the cookie lives for the
        # browser session.
        self._response.set_cookie(
            name,
            value=value,
            httponly=httponly,
            samesite=samesite,
            secure=secure,
        )

    def clear(self, name: str, *, httponly: bool, samesite: str, secure: bool) -> None:
        self._response.delete_cookie(name, httponly=httponly, samesite=samesite, secure=secure)
