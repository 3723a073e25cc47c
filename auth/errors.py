"""
auth/errors.py -- Exceptions raised by the auth core and the user store.

Only configuration and storage conflicts are exceptions. A password that
does not match is an ordinary False from verify_password(), never an error.
"""

from __future__ import annotations

from enum import Enum


class ConfigErrorKind(str, Enum):
    MISSING_KEY = "missing_key"
    KEY_TOO_SHORT = "key_too_short"
    INVALID_KEY = "invalid_key"


class ConfigurationError(Exception):
    """The signing key is unusable. Fatal at startup -- do not serve traffic."""

    def __init__(self, kind: ConfigErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class DuplicateEmailError(Exception):
    """Raised by UserStore.insert() when the email is already registered (any case)."""

    def __init__(self, email: str) -> None:
        super().__init__(f"Email already registered: {email}")
        self.email = email
