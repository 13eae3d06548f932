# =============================================================================
# core/models/identity.py - Identity Schema
# =============================================================================
# The externally-authenticated principal as reported by the identity
# provider. The portal only observes identities; it never mutates them.
# =============================================================================

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Identity(BaseModel):
    """
    Signed-in principal issued by the identity provider.

    Example:
        {
            "uid": "550e8400-e29b-41d4-a716-446655440000",
            "email": "player@diu.edu.bd",
            "display_name": "NightOwl",
            "photo_url": null
        }
    """

    model_config = ConfigDict(frozen=True)

    uid: str = Field(..., min_length=1, description="Provider-issued user id")
    email: str | None = None
    display_name: str | None = None
    photo_url: str | None = None

    @classmethod
    def from_provider_user(cls, user: Any) -> "Identity":
        """
        Build an Identity from a Supabase Auth user object.

        Display name and avatar live in user_metadata; different sign-in
        methods store them under different keys.
        """
        metadata = getattr(user, "user_metadata", None) or {}
        return cls(
            uid=str(user.id),
            email=getattr(user, "email", None),
            display_name=metadata.get("display_name") or metadata.get("full_name") or metadata.get("name"),
            photo_url=metadata.get("avatar_url") or metadata.get("picture"),
        )
