"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Two token sources are checked in priority order:
  1. Session cookie (Settings.cookie_name) -- set by register/login.
  2. Authorization: Bearer <token> header -- API clients holding a token.

try_get_current_user() is the soft variant (returns None on failure) and is
what populates AuthContext.user before any credential handler runs.
get_auth_context() bundles that user with a CookieWriter for the response.

Layer rule: auth/dependencies.py may import from fastapi because this module
is part of the FastAPI dependency injection system. It reads settings and the
store from app.state, which the lifespan populates.
"""

from __future__ import annotations

from fastapi import Request, Response

from auth.context import AuthContext, ResponseCookies
from auth.models import User
from auth.tokens import decode_session_token


def try_get_current_user(request: Request) -> User | None:
    """Resolve the request's session token to a User.

    Returns None for a missing, malformed, or forged token, and for a token
    whose user no longer exists. Never raises.
    """
    settings = request.app.state.settings
    user_store = request.app.state.user_store

    token: str | None = request.cookies.get(settings.cookie_name)
    if not token:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token = auth_header[7:]

    if not token:
        return None
    payload = decode_session_token(token, settings.secret_key)
    if payload is None:
        return None
    return user_store.get_by_id(payload["user_id"])


def get_auth_context(request: Request, response: Response) -> AuthContext:
    """Build the AuthContext for a credential handler.

    Cookies written through the context land on FastAPI's injected response,
    which FastAPI merges into whatever the route returns.
    """
    return AuthContext(cookies=ResponseCookies(response), user=try_get_current_user(request))
