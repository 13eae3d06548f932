# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - identity.py: Identity reported by the identity provider
# - profile.py: UserProfile record and its create/update payloads
# - session.py: SessionState snapshot shared by guards and views
# =============================================================================

from .identity import Identity
from .profile import (
    DEFAULT_AVATAR,
    ProfileCreate,
    ProfileUpdate,
    UserProfile,
    UserRole,
    default_avatar,
)
from .session import SessionState

__all__ = [
    # Identity
    "Identity",
    # Profile
    "DEFAULT_AVATAR",
    "ProfileCreate",
    "ProfileUpdate",
    "UserProfile",
    "UserRole",
    "default_avatar",
    # Session
    "SessionState",
]
