"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). The store and the
account service do the work; these only own the domain shape.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Credential:
    """A stored password verifier.

    hash is HMAC-SHA512(key=salt, msg=utf8(password)). salt is random bytes
    generated fresh for every credential, never derived from user input.
    Replaced wholesale on password change, never mutated.
    """

    hash: bytes
    salt: bytes

    def __repr__(self) -> str:
        return f"Credential(hash=<{len(self.hash)} bytes>, salt=<{len(self.salt)} bytes>)"


@dataclass(frozen=True)
class Identity:
    """Who a token speaks for.

    email is unique case-insensitively across identities (the store enforces
    it), but is kept here exactly as the user typed it.
    """

    id: str
    email: str
    display_name: str = ""


@dataclass(frozen=True)
class IssuedToken:
    """A compact HS512 JWT: header.payload.signature, all base64url."""

    encoded: str

    def __str__(self) -> str:
        return self.encoded


@dataclass
class User:
    """A row in the users table: an identity plus its password credential."""

    identity: Identity
    credential: Credential
    created_at: str | None = None

    @property
    def id(self) -> str:
        return self.identity.id

    @property
    def email(self) -> str:
        return self.identity.email

    @property
    def display_name(self) -> str:
        return self.identity.display_name
