# =============================================================================
# core/models/session.py - Session State
# =============================================================================
# Immutable snapshot of "who is signed in and what is their role".
# The session manager swaps snapshots; everyone else only reads them.
# =============================================================================

from pydantic import BaseModel, ConfigDict

from .identity import Identity
from .profile import UserProfile, UserRole


class SessionState(BaseModel):
    """
    Process-local session snapshot.

    - loading: True until the first identity notification has been applied
    - resolving: True while the profile of the current identity is being fetched
    - error: last recoverable failure (lookup failure, init timeout)

    Flow: loading -> (identity, resolving) -> (identity, profile) -> (none)
    """

    model_config = ConfigDict(frozen=True)

    identity: Identity | None = None
    profile: UserProfile | None = None
    loading: bool = True
    resolving: bool = False
    error: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def is_admin(self) -> bool:
        """True only when a profile is loaded and carries the admin role."""
        return self.profile is not None and self.profile.role == UserRole.ADMIN
