# =============================================================================
# app/routers/profile.py - Own Profile Endpoints
# =============================================================================
# Read and edit the signed-in user's profile.
# =============================================================================

import asyncio
import logging

from fastapi import APIRouter, Depends

from app.auth import require_user
from app.dependencies import ProfileServiceDep, SessionManagerDep
from app.exceptions import ProfileNotFoundError
from core.models.profile import ProfileUpdate, UserProfile
from core.models.session import SessionState

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/profile", response_model=UserProfile)
async def get_own_profile(state: SessionState = Depends(require_user)) -> UserProfile:
    """
    Get the signed-in user's profile.

    Raises:
        404: If the profile hasn't been created yet
    """
    if state.profile is None:
        raise ProfileNotFoundError(state.identity.uid)
    return state.profile


@router.patch("/profile", response_model=UserProfile)
async def update_own_profile(
    changes: ProfileUpdate,
    manager: SessionManagerDep,
    profiles: ProfileServiceDep,
    state: SessionState = Depends(require_user),
) -> UserProfile:
    """
    Edit display name, bio or avatar.

    The session's copy of the profile is re-read afterwards so every
    view sees the new values.
    """
    profile = await asyncio.to_thread(profiles.update_profile, state.identity.uid, changes)
    await manager.refresh_after_write()
    return profile
