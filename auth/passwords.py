"""
auth/passwords.py -- Salted password derivation and constant-time verification.

Scheme: HMAC-SHA512 keyed by a per-credential random salt.
  derive_credential() draws 128 random bytes (the SHA-512 block size, so the
  HMAC key is used without being pre-hashed) from the OS CSPRNG and uses them
  as the HMAC key over the UTF-8 password bytes. The salt is the key.

  verify_password() recomputes the HMAC under the stored salt and compares
  with hmac.compare_digest(). A byte loop that returns on the first mismatch
  leaks how many leading bytes matched; compare_digest does not.

Password strength policy is not enforced here. The empty string derives like
any other password; minimum lengths belong to the API request models.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

from auth.models import Credential

SALT_BYTES = 128


def _utf8(password: str) -> bytes:
    try:
        return password.encode("utf-8")
    except UnicodeEncodeError:
        # Lone surrogates become U+FFFD; valid surrogate pairs are joined.
        return password.encode("utf-16", "surrogatepass").decode("utf-16", "replace").encode("utf-8")


def _keyed_hash(salt: bytes, password: str) -> bytes:
    return hmac.new(salt, _utf8(password), hashlib.sha512).digest()


def derive_credential(password: str) -> Credential:
    """Return a fresh Credential for the given plaintext password.

    Every call draws a new salt, so two users with the same password (or one
    user registering twice) get different salts and different hashes.
    """
    salt = secrets.token_bytes(SALT_BYTES)
    return Credential(hash=_keyed_hash(salt, password), salt=salt)


def verify_password(password: str, credential: Credential) -> bool:
    """Return True if password matches the stored credential.

    Never raises for well-typed input: a length mismatch (e.g. a truncated
    hash in storage) is just False.
    """
    candidate = _keyed_hash(credential.salt, password)
    return hmac.compare_digest(candidate, credential.hash)


# Timing equalization credential.
# Derived once at import so logins for unknown emails run the same HMAC
# work as logins for known ones (see auth.accounts.authenticate_user).
DUMMY_CREDENTIAL: Credential = derive_credential(secrets.token_urlsafe(16))
