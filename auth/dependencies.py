"""
auth/dependencies.py -- FastAPI Depends() helpers for bearer-token authentication.

Tokens arrive as "Authorization: Bearer <jwt>". The configured TokenIssuer
on app.state verifies signature and expiry; the user is then re-read from
the store so a deleted account stops authenticating immediately.

try_get_current_user() is the soft variant (returns None on failure).
get_current_user() wraps it and raises HTTP 401 if unauthenticated.

Layer rule: no imports from core/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import User


def try_get_current_user(request: Request) -> User | None:
    """Authenticate the request from its Bearer token. Never raises."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    claims = request.app.state.token_issuer.decode(auth_header[7:])
    if claims is None:
        return None
    return request.app.state.user_store.get_by_id(claims["nameid"])


def get_current_user(request: Request) -> User:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(user: User = Depends(get_current_user)): ...
    """
    user = try_get_current_user(request)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return user
