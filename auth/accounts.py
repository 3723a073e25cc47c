"""
auth/accounts.py -- Registration and login, composed from store + core.

Registration: reject a taken email (any case) -> derive_credential ->
    UserStore.insert -> TokenIssuer.issue. A successful registration always
    returns a token, so a new user is signed in immediately.

Login: find_by_email (case-insensitive) -> verify_password -> issue.
    authenticate_user() runs the HMAC even for unknown emails, against
    DUMMY_CREDENTIAL, so the response time does not reveal whether an
    account exists. Route code must use it rather than inlining the lookup
    and verification.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
import uuid

from auth.errors import DuplicateEmailError
from auth.models import Identity, IssuedToken, User
from auth.passwords import DUMMY_CREDENTIAL, derive_credential, verify_password
from auth.store import UserStore
from auth.tokens import TokenIssuer

logger = logging.getLogger("credcore.auth")


def register_account(
    store: UserStore,
    issuer: TokenIssuer,
    display_name: str,
    email: str,
    password: str,
) -> tuple[User, IssuedToken]:
    """Create a user and sign them in.

    Surrounding whitespace is trimmed from email and display_name before
    anything is checked or stored. Raises DuplicateEmailError if the email
    is already registered. The check runs before any credential is derived;
    the store's unique index catches a concurrent registration that slips
    past it.
    """
    email = email.strip()
    display_name = display_name.strip()
    if store.email_exists(email):
        raise DuplicateEmailError(email)

    user = User(
        identity=Identity(id=str(uuid.uuid4()), email=email, display_name=display_name),
        credential=derive_credential(password),
    )
    store.insert(user)
    token = issuer.issue(user.identity)
    logger.info("Registered user %s", user.id)
    return user, token


def authenticate_user(store: UserStore, email: str, password: str) -> User | None:
    """Return the user if email and password match, None on any failure.

    - Unknown email: HMAC runs against DUMMY_CREDENTIAL (same cost as a real check)
    - Wrong password: HMAC runs against the stored credential
    """
    user = store.find_by_email(email.strip(), case_insensitive=True)
    if user is None:
        # Equalize timing -- do NOT return before running the HMAC
        verify_password(password, DUMMY_CREDENTIAL)
        return None
    if not verify_password(password, user.credential):
        return None
    return user


def login(
    store: UserStore,
    issuer: TokenIssuer,
    email: str,
    password: str,
) -> tuple[User, IssuedToken] | None:
    """Authenticate and issue a token. None means bad email or bad password."""
    user = authenticate_user(store, email, password)
    if user is None:
        logger.info("Login failed")
        return None
    token = issuer.issue(user.identity)
    logger.info("Login: %s", user.id)
    return user, token
