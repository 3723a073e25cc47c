"""
api/routes/account.py -- Account registration, login and identity endpoints.

Routes:
  POST /api/account/register   -- create account; returns user + token
  POST /api/account/login      -- password login; returns user + token
  GET  /api/account/me         -- identity behind the Bearer token (requires auth)

Security:
  authenticate_user() (via accounts.login) equalizes timing for unknown
  emails -- use it, never inline the store lookup + verify_password().
  Login returns one generic error for unknown email and wrong password so
  the response does not reveal whether an account exists.
  Cache-Control: no-store on every response that carries a token.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import LoginRequest, MeResponse, RegisterRequest, UserResponse
from auth.accounts import login as login_account
from auth.accounts import register_account
from auth.dependencies import get_current_user
from auth.errors import DuplicateEmailError
from auth.models import User
from auth.store import UserStore
from auth.tokens import TokenIssuer

logger = logging.getLogger("credcore.api.account")

# Auth policy:
# - POST /api/account/register: public
# - POST /api/account/login:    public
# - GET  /api/account/me:       requires auth (get_current_user)
router = APIRouter()


def _error(status_code: int, code: str, message: str) -> JSONResponse:
    resp = JSONResponse(status_code=status_code, content={"error": {"code": code, "message": message}})
    resp.headers["Cache-Control"] = "no-store"
    return resp


def _signed_in(body: UserResponse) -> JSONResponse:
    resp = JSONResponse(status_code=200, content=body.model_dump(by_alias=True))
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/account/register", response_model=UserResponse)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create an account and sign the new user in.

    Returns 400 email_taken if the email is already registered in any letter
    case, whether caught by the pre-check or by the store's unique index.
    """
    user_store: UserStore = request.app.state.user_store
    issuer: TokenIssuer = request.app.state.token_issuer
    try:
        user, token = register_account(user_store, issuer, body.display_name, body.email, body.password)
    except DuplicateEmailError:
        return _error(400, "email_taken", "Email already registered.")
    return _signed_in(UserResponse.from_user(user, token))


@router.post("/account/login", response_model=UserResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return user + token."""
    user_store: UserStore = request.app.state.user_store
    issuer: TokenIssuer = request.app.state.token_issuer
    result = login_account(user_store, issuer, body.email, body.password)
    if result is None:
        return _error(401, "bad_credentials", "Invalid email or password.")
    user, token = result
    return _signed_in(UserResponse.from_user(user, token))


@router.get("/account/me", response_model=MeResponse)
async def me(current_user: User = Depends(get_current_user)) -> MeResponse:
    """Return identity information for the currently authenticated user."""
    return MeResponse(id=current_user.id, display_name=current_user.display_name, email=current_user.email)
