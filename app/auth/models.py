# =============================================================================
# app/auth/models.py - Authentication Request/Response Models
# =============================================================================

from pydantic import BaseModel, Field, model_validator

from core.models.identity import Identity
from core.models.profile import UserProfile


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, examples=["player@diu.edu.bd"])
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """Sign-up form. Mirrors the checks the sign-up page runs before submitting."""

    email: str = Field(..., min_length=3, examples=["player@diu.edu.bd"])
    password: str = Field(..., min_length=6, description="At least 6 characters")
    confirm_password: str
    display_name: str | None = Field(default=None, max_length=64)

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class SessionResponse(BaseModel):
    """
    Snapshot of the session for clients.

    `session_hint` is only a fast-path hint for the UI; `authenticated` is
    the authoritative value.
    """

    loading: bool
    authenticated: bool
    is_admin: bool
    resolving: bool = False
    identity: Identity | None = None
    profile: UserProfile | None = None
    error: str | None = None
    session_hint: bool = False


class SignInResponse(BaseModel):
    identity: Identity
    access_token: str | None = None
    message: str = "Signed in successfully"


class RegisterResponse(BaseModel):
    identity: Identity
    profile: UserProfile
    message: str = "Account created successfully"


class UserResponse(BaseModel):
    """
    Current user for /auth/me.

    `profile` is None while the profile row hasn't been created yet.
    """

    identity: Identity
    profile: UserProfile | None = None
    is_admin: bool = False
