"""
auth/tokens.py -- HS512 JWT issuance for authenticated identities.

Security design decisions:
  Signing: python-jose with HS512. HMAC-SHA512 is keyed directly with the
       configured bytes (no stretching), so the key must carry at least 512
       bits: TokenIssuer refuses keys shorter than 64 UTF-8 bytes with
       ConfigurationError(KEY_TOO_SHORT), and a missing key with
       ConfigurationError(MISSING_KEY). Keys that python-jose would take for
       a PEM or SSH public key are refused up front with INVALID_KEY.

  No ambient key: the issuer is built from an explicit key value. There is no
       module-level secret, so tests can run issuers with different keys side
       by side. A TokenIssuer can only be obtained already configured.

  Claims: email (verbatim), nameid (the subject id as a string), nbf/iat
       (issue time) and exp (issue time + 7 days), all times as integer
       seconds since the epoch. The claim names match what the existing
       browser client reads.

  Statelessness: issue() reads only the immutable key and the clock, so it
       is safe to call from any number of threads at once.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from jose import JWTError, jwk, jwt
from jose.exceptions import JOSEError

from auth.errors import ConfigErrorKind, ConfigurationError
from auth.models import Identity, IssuedToken

logger = logging.getLogger("credcore.auth.tokens")

ALGORITHM = "HS512"
MIN_KEY_BYTES = 64
TOKEN_LIFETIME_SECONDS = 7 * 24 * 60 * 60


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _key_bytes(key_material: str | bytes | None) -> bytes:
    if not key_material:
        raise ConfigurationError(ConfigErrorKind.MISSING_KEY, "Cannot get token key!")
    key = key_material.encode("utf-8") if isinstance(key_material, str) else bytes(key_material)
    if len(key) < MIN_KEY_BYTES:
        raise ConfigurationError(
            ConfigErrorKind.KEY_TOO_SHORT,
            f"Token key needs to be >= {MIN_KEY_BYTES} bytes!",
        )
    # jose refuses HMAC keys that look like public keys or certificates.
    try:
        jwk.construct(key, ALGORITHM)
    except JOSEError as exc:
        raise ConfigurationError(
            ConfigErrorKind.INVALID_KEY,
            f"Token key is not usable as an {ALGORITHM} secret!",
        ) from exc
    return key


class TokenIssuer:
    """Signs identity claims into compact JWTs under one symmetric key.

    Usage:
        issuer = TokenIssuer.configure(settings.token_key)
        token = issuer.issue(Identity(id="u1", email="a@b.com"))
    """

    def __init__(
        self,
        key_material: str | bytes | None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._key: bytes = _key_bytes(key_material)
        self._clock = clock

    @classmethod
    def configure(
        cls,
        key_material: str | bytes | None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> TokenIssuer:
        """Validate key_material and return a ready issuer.

        Raises ConfigurationError (MISSING_KEY, KEY_TOO_SHORT or INVALID_KEY). Callers at
        startup should let it propagate: the process must not serve traffic
        without a valid key.
        """
        issuer = cls(key_material, clock=clock)
        logger.info("Token issuer configured (%s)", ALGORITHM)
        return issuer

    def __repr__(self) -> str:
        return f"TokenIssuer(algorithm={ALGORITHM!r})"

    def issue(self, identity: Identity) -> IssuedToken:
        """Return a signed token for identity, valid for 7 days from now.

        Raises ValueError if the identity has no id or no email. A token
        without a subject must never be emitted.
        """
        if identity is None or not identity.id or not identity.email:
            raise ValueError("Cannot issue a token for an identity without id and email")

        issued_at = int(self._clock().timestamp())
        claims = {
            "email": identity.email,
            "nameid": str(identity.id),
            "nbf": issued_at,
            "exp": issued_at + TOKEN_LIFETIME_SECONDS,
            "iat": issued_at,
        }
        return IssuedToken(jwt.encode(claims, self._key, algorithm=ALGORITHM))

    def decode(self, token: str) -> dict | None:
        """Verify a token's signature, algorithm and expiry; return its claims.

        Returns None on any failure, so callers treat every bad token the
        same way (unauthenticated).
        """
        try:
            claims = jwt.decode(token, self._key, algorithms=[ALGORITHM])
        except JWTError:
            return None
        if "nameid" not in claims or "email" not in claims:
            return None
        return claims
