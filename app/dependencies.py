# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# The session manager and navigator are created once in the app lifespan
# and stored on app.state.
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request

from app.config import settings
from core.auth import Navigator, SessionManager
from core.services import ProfileService, RoleService


def get_session_manager(request: Request) -> SessionManager:
    """Return the process-wide session manager."""
    return request.app.state.session_manager


def get_navigator(request: Request) -> Navigator:
    """Return the process-wide navigator."""
    return request.app.state.navigator


def get_profile_service() -> ProfileService:
    """Profile store bound to the shared Supabase client."""
    return ProfileService()


def get_role_service(
    profiles: ProfileService = Depends(get_profile_service),
) -> RoleService:
    return RoleService(profiles, bootstrap_enabled=settings.ADMIN_BOOTSTRAP_ENABLED)


# Type aliases for dependency injection
SessionManagerDep = Annotated[SessionManager, Depends(get_session_manager)]
NavigatorDep = Annotated[Navigator, Depends(get_navigator)]
ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
RoleServiceDep = Annotated[RoleService, Depends(get_role_service)]
