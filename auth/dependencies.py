"""
auth/dependencies.py -- FastAPI Depends() helpers for bearer authentication.

The only accepted credential is an Authorization header carrying a token
issued by POST /api/login:

    Authorization: Bearer <token>

The raw header value is handed to TokenService.verify(), which strips the
"Bearer " prefix itself, so a bare token in the header is accepted too.

get_current_identity() raises HTTP 401 with the rejection code
(missing_token, malformed_token, expired_token, invalid_signature).
The verified identity comes straight from the token claims; there is no
lookup against the users table.

Layer rule: no imports from inventory/.
  auth/dependencies.py may import from fastapi because this module is part of
  the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request

from auth.tokens import TokenError, TokenIdentity, TokenService

logger = logging.getLogger("gameserver.auth")

_MESSAGES = {
    "missing_token": "Authorization header is required.",
    "expired_token": "Token has expired.",
}


def get_token_service(request: Request) -> TokenService:
    """Return the process-wide TokenService created in the app lifespan."""
    return request.app.state.token_service


def get_current_identity(request: Request) -> TokenIdentity:
    """Require a valid bearer token. Raises HTTP 401 on any rejection.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: TokenIdentity = Depends(get_current_identity)): ...
    """
    tokens = get_token_service(request)
    header = request.headers.get("Authorization")
    try:
        return tokens.verify(header)
    except TokenError as exc:
        # Log the reason only -- never the presented token.
        logger.info("Token rejected on %s: %s", request.url.path, exc.reason)
        raise HTTPException(
            status_code=401,
            detail={"code": exc.code, "message": _MESSAGES.get(exc.code, "Invalid or expired token.")},
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
