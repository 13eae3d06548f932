# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .profile_service import ProfileService
from .role_service import RoleService

__all__ = [
    "ProfileService",
    "RoleService",
]
