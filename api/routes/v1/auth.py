"""
api/routes/v1/auth.py -- Credential endpoints.

Routes:
  GET  /api/v1/auth/user      -- getUser: current user or {"user": null}
  POST /api/v1/auth/register  -- registerUser: create account; sets session cookie
  POST /api/v1/auth/login     -- loginUser: password login; sets session cookie
  POST /api/v1/auth/logout    -- logoutUser: clears session cookie

All four are public. The routes only translate between HTTP and the
credential service: body -> arguments, Err -> HTTPException, User -> model.

Security:
  register and login are rate-limited per IP (Settings.auth_rate_limit).
  Cache-Control: no-store on register and login responses, success or not.

No `from __future__ import annotations` here: FastAPI resolves endpoint
annotations through the slowapi wrapper, whose globals are not this module's.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from api.limiter import auth_rate_limit, limiter
from api.models import LoginRequest, MessageResponse, RegisterRequest, UserPayloadResponse, UserResponse
from auth.context import AuthContext
from auth.dependencies import get_auth_context
from auth.models import User
from auth.service import CredentialService, Err, UserPayload

router = APIRouter()

_NO_STORE = {"Cache-Control": "no-store"}


@router.get("/auth/user", response_model=UserPayloadResponse)
def get_user(request: Request, context: AuthContext = Depends(get_auth_context)) -> UserPayloadResponse:
    """Return the authenticated user, or user=null when anonymous."""
    service: CredentialService = request.app.state.credential_service
    return _payload_to_response(service.get_user(context))


# The router must register the limiter-wrapped function; route limits only
# run inside the wrapper, not in SlowAPIMiddleware.
@router.post("/auth/register", response_model=UserPayloadResponse, status_code=201)
@limiter.limit(auth_rate_limit)
def register_user(
    request: Request,
    response: Response,
    body: RegisterRequest,
    context: AuthContext = Depends(get_auth_context),
) -> UserPayloadResponse:
    """Create an account and log it in."""
    service: CredentialService = request.app.state.credential_service
    result = service.register_user(body.username, body.email, body.password, context)
    response.headers.update(_NO_STORE)
    return _unwrap(result)


@router.post("/auth/login", response_model=UserPayloadResponse)
@limiter.limit(auth_rate_limit)
def login_user(
    request: Request,
    response: Response,
    body: LoginRequest,
    context: AuthContext = Depends(get_auth_context),
) -> UserPayloadResponse:
    """Authenticate with email and password; set the session cookie."""
    service: CredentialService = request.app.state.credential_service
    result = service.login_user(body.email, body.password, context)
    response.headers.update(_NO_STORE)
    return _unwrap(result)


@router.post("/auth/logout", response_model=MessageResponse)
def logout_user(request: Request, context: AuthContext = Depends(get_auth_context)) -> MessageResponse:
    """Clear the session cookie. Does not revoke tokens held elsewhere."""
    service: CredentialService = request.app.state.credential_service
    return MessageResponse(message=service.logout_user(context).message)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _unwrap(result) -> UserPayloadResponse:
    if isinstance(result, Err):
        raise HTTPException(
            status_code=result.error.status_code,
            detail={"code": result.error.kind.value, "message": result.error.message},
            headers=_NO_STORE,
        )
    return _payload_to_response(result.value)


def _payload_to_response(payload: UserPayload) -> UserPayloadResponse:
    return UserPayloadResponse(user=_user_to_response(payload.user) if payload.user else None)


def _user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        created_at=user.created_at,
    )
