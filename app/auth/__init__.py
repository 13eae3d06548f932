# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Session endpoints, access token verification and the HTTP access guard.
#
# Usage:
#   from app.auth import require_access, require_admin
#   from core.auth import AccessPolicy
#
#   @router.get("/protected")
#   async def protected(state: SessionState = Depends(require_access(AccessPolicy.AUTHENTICATED))):
#       return {"uid": state.identity.uid}
# =============================================================================

from app.auth.dependencies import (
    get_caller_uid,
    get_session_state,
    get_view_paths,
    require_access,
    require_admin,
    require_guest,
    require_user,
    require_view,
    verify_access_token,
)
from app.auth.models import SessionResponse, UserResponse

__all__ = [
    "get_caller_uid",
    "get_session_state",
    "get_view_paths",
    "require_access",
    "require_admin",
    "require_guest",
    "require_user",
    "require_view",
    "verify_access_token",
    "SessionResponse",
    "UserResponse",
]
