"""
API request and response models for credcore REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Account models use camelCase on the wire (displayName), which is what the
browser client sends and reads. populate_by_name lets Python code and tests
build them with snake_case names too.
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

from auth.models import IssuedToken, User

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"

_Trimmed = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/account/register."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    display_name: _Trimmed
    email: Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=255, pattern=EMAIL_PATTERN)]
    # Not stripped: whitespace in a password is significant.
    password: str = Field(min_length=4, max_length=255, json_schema_extra={"format": "password"})


class LoginRequest(BaseModel):
    """Request body for POST /api/account/login.

    No length rules beyond "present": a login with a too-short password is
    simply a failed login (401), not a validation error.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(max_length=255)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """A signed-in user: identity plus a freshly issued bearer token."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    display_name: str
    email: str
    token: str

    @classmethod
    def from_user(cls, user: User, token: IssuedToken) -> "UserResponse":
        return cls(id=user.id, display_name=user.display_name, email=user.email, token=token.encoded)


class MeResponse(BaseModel):
    """Response for GET /api/account/me."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    display_name: str
    email: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
