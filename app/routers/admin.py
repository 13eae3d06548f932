# =============================================================================
# app/routers/admin.py - Admin Endpoints
# =============================================================================
# User management for admins plus the one-time admin bootstrap.
#
# The admin guard keeps non-admin sessions out; the profile store's access
# rules are still the final word on every write.
# =============================================================================

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel, Field

from app.auth import require_admin, require_user
from app.dependencies import ProfileServiceDep, RoleServiceDep, SessionManagerDep
from core.models.profile import UserProfile, UserRole
from core.models.session import SessionState

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class RoleChangeRequest(BaseModel):
    role: UserRole = Field(..., examples=["admin"])


class UserListResponse(BaseModel):
    users: list[UserProfile]
    limit: int
    offset: int


class AdminStatsResponse(BaseModel):
    total_users: int
    total_admins: int


class BootstrapResponse(BaseModel):
    changed: bool
    message: str


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/admin/users", response_model=UserListResponse)
async def list_users(
    profiles: ProfileServiceDep,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    state: SessionState = Depends(require_admin),
) -> UserListResponse:
    """List profiles, newest first."""
    users = await asyncio.to_thread(profiles.list_profiles, limit, offset)
    return UserListResponse(users=users, limit=limit, offset=offset)


@router.patch("/admin/users/{uid}/role", status_code=204)
async def change_user_role(
    uid: Annotated[str, Path(min_length=1, description="Target profile uid")],
    body: RoleChangeRequest,
    roles: RoleServiceDep,
    manager: SessionManagerDep,
    state: SessionState = Depends(require_admin),
) -> None:
    """
    Promote or demote a user.

    Raises:
        403: If the store rejects the change
        404: If no profile matched
    """
    await asyncio.to_thread(roles.change_role, uid, body.role)
    if uid == state.identity.uid:
        await manager.refresh_after_write()


@router.delete("/admin/users/{uid}", status_code=204)
async def delete_user(
    uid: Annotated[str, Path(min_length=1, description="Target profile uid")],
    profiles: ProfileServiceDep,
    state: SessionState = Depends(require_admin),
) -> None:
    """Hard-delete a user's profile."""
    await asyncio.to_thread(profiles.delete_profile, uid)
    logger.warning(f"Admin {state.identity.uid} deleted profile {uid}")


@router.get("/admin/stats", response_model=AdminStatsResponse)
async def admin_stats(
    profiles: ProfileServiceDep,
    state: SessionState = Depends(require_admin),
) -> AdminStatsResponse:
    total_users, total_admins = await asyncio.gather(
        asyncio.to_thread(profiles.count_profiles),
        asyncio.to_thread(profiles.count_admins),
    )
    return AdminStatsResponse(total_users=total_users, total_admins=total_admins)


@router.post("/setup-admin", response_model=BootstrapResponse)
async def setup_admin(
    roles: RoleServiceDep,
    manager: SessionManagerDep,
    state: SessionState = Depends(require_user),
) -> BootstrapResponse:
    """
    Make the signed-in user the first admin.

    Only works while bootstrap is enabled and no admin exists yet.

    Raises:
        403: If bootstrap is unavailable
        404: If the caller has no profile
    """
    changed = await asyncio.to_thread(roles.bootstrap_admin, state)
    await manager.refresh_after_write()
    message = "You are now an admin" if changed else "You are already an admin"
    return BootstrapResponse(changed=changed, message=message)
