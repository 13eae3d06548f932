# =============================================================================
# core/models/profile.py - User Profile Schemas
# =============================================================================
# One profile row per identity, keyed by the identity's uid. The row holds
# the application-owned attributes: role, display data, social graph and
# timestamps.
#
# - UserRole: user / admin
# - UserProfile: the stored record
# - ProfileCreate: initial values written by the sign-up flow
# - ProfileUpdate: fields a user may edit on their own profile
# =============================================================================

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_AVATAR = "https://api.dicebear.com/7.x/avataaars/svg"


def default_avatar(uid: str) -> str:
    """Deterministic generated avatar for a uid."""
    return f"{DEFAULT_AVATAR}?seed={uid}"


class UserRole(str, Enum):
    """
    Access role stored on a profile.

    Every new profile starts as `user`; only an admin action (or the
    one-time bootstrap) changes it.
    """
    USER = "user"
    ADMIN = "admin"


class UserProfile(BaseModel):
    """
    Application-owned record for an identity.

    Example:
        {
            "uid": "550e8400-...",
            "display_name": "NightOwl",
            "email": "player@diu.edu.bd",
            "photo_url": "https://api.dicebear.com/7.x/avataaars/svg?seed=550e8400-...",
            "bio": "",
            "role": "user",
            "level": 1,
            "followers": [],
            "following": [],
            "achievements": [],
            "created_at": "2024-01-15T10:30:00Z",
            "updated_at": "2024-01-15T10:30:00Z"
        }
    """

    model_config = ConfigDict(frozen=True)

    uid: str = Field(..., min_length=1)
    display_name: str | None = None
    email: str | None = None
    photo_url: str | None = None
    bio: str = ""
    role: UserRole = UserRole.USER
    level: int = Field(default=1, ge=1)
    followers: frozenset[str] = Field(default_factory=frozenset)
    following: frozenset[str] = Field(default_factory=frozenset)
    achievements: frozenset[str] = Field(default_factory=frozenset)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "UserProfile":
        """
        Create a profile from a database row.

        Array columns come back as lists (or NULL); missing optional columns
        fall back to the model defaults.
        """
        data = {key: value for key, value in row.items() if key in cls.model_fields}
        for key in ("followers", "following", "achievements"):
            data[key] = frozenset(data.get(key) or ())
        if data.get("bio") is None:
            data.pop("bio", None)
        if data.get("role") is None:
            data.pop("role", None)
        return cls(**data)

    def to_row(self) -> dict[str, Any]:
        """Serialize for insertion into the profiles table."""
        row = self.model_dump(mode="json")
        for key in ("followers", "following", "achievements"):
            row[key] = sorted(row[key])
        return row


class ProfileCreate(BaseModel):
    """Initial values for a new profile, supplied by the sign-up flow."""

    email: str | None = None
    display_name: str | None = Field(default=None, max_length=64)
    photo_url: str | None = None

    def build(self, uid: str) -> UserProfile:
        """Fill in defaults for a brand new profile."""
        now = datetime.now(timezone.utc)
        display_name = self.display_name
        if not display_name and self.email:
            display_name = self.email.split("@")[0]
        return UserProfile(
            uid=uid,
            email=self.email,
            display_name=display_name,
            photo_url=self.photo_url or default_avatar(uid),
            created_at=now,
            updated_at=now,
        )


class ProfileUpdate(BaseModel):
    """
    Editable profile fields.

    Only fields that are explicitly set are written.
    """

    display_name: str | None = Field(default=None, min_length=1, max_length=64)
    bio: str | None = Field(default=None, max_length=500)
    photo_url: str | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)
