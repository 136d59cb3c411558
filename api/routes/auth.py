"""
api/routes/auth.py -- Credential login endpoint.

Routes:
  POST /api/login -- exchange username/password for a bearer token

Security:
  Rate-limited per client IP (Settings.login_rate_limit, default 10/minute).
  authenticate_user() provides timing equalization -- use it, never inline.
  Cache-Control: no-store on every login response, success or failure.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter, login_rate_limit
from api.models import ErrorDetail, ErrorResponse, LoginRequest, LoginResponse
from auth.passwords import authenticate_user
from auth.store import UserStore
from auth.tokens import TokenService

logger = logging.getLogger("gameserver.auth")

# Auth policy:
# - POST /api/login: public -- the login endpoint must be unauthenticated
router = APIRouter()


@router.post("/login", response_model=LoginResponse)
@limiter.limit(login_rate_limit)  # below @router.post so the router registers the rate-limited wrapper
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password; return a signed access token.

    Returns the same generic error for wrong username and wrong password
    ("bad_credentials") to avoid leaking username existence information.
    """
    user_store: UserStore = request.app.state.user_store
    tokens: TokenService = request.app.state.token_service

    user = authenticate_user(user_store, body.username, body.password)
    if user is None:
        logger.info("Failed login for username=%r", body.username)
        resp = JSONResponse(
            status_code=401,
            content=ErrorResponse(
                error=ErrorDetail(code="bad_credentials", message="Invalid username or password.")
            ).model_dump(exclude_none=True),
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    token = tokens.issue(user.id, user.username)
    logger.info("Issued token for user_id=%d", user.id)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            user_id=user.id,
            username=user.username,
            access_token=token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=tokens.expire_seconds,
        ).model_dump(by_alias=True),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp
