# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Sign-in, sign-up, sign-out and session inspection.
#
# Sign-in only asks the identity provider; the session itself changes when
# the provider's notification reaches the session manager.
# =============================================================================

import asyncio
import logging

from fastapi import APIRouter, Depends, Response

from app.auth.dependencies import get_caller_uid, get_view_paths, require_user
from app.auth.models import (
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    SessionResponse,
    SignInResponse,
    UserResponse,
)
from app.config import settings
from app.dependencies import ProfileServiceDep, SessionManagerDep
from core.auth import ViewPaths, state_for_caller
from core.models.profile import ProfileCreate
from core.models.session import SessionState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

SESSION_COOKIE = "session"


@router.post("/login", response_model=SignInResponse)
async def login(body: LoginRequest, manager: SessionManagerDep) -> SignInResponse:
    """
    Sign in with email and password.

    The returned access token is what the client sends as
    `Authorization: Bearer ...` from then on.

    Raises:
        401: If the credentials are rejected
    """
    identity = await manager.sign_in(body.email, body.password)
    access_token = await asyncio.to_thread(manager.provider.access_token)
    return SignInResponse(identity=identity, access_token=access_token)


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    body: RegisterRequest,
    manager: SessionManagerDep,
    profiles: ProfileServiceDep,
) -> RegisterResponse:
    """
    Create an account and its profile.

    The profile starts with the `user` role and a generated avatar.

    Raises:
        401: If the identity provider rejects the sign-up
        502: If the profile row can't be written
    """
    identity = await asyncio.to_thread(
        manager.provider.sign_up, body.email, body.password, body.display_name
    )
    profile = await asyncio.to_thread(
        profiles.create_profile,
        identity.uid,
        ProfileCreate(email=identity.email or body.email, display_name=body.display_name),
    )

    # The provider may already have signed the new identity in, before
    # its profile existed.
    current = manager.session.state.identity
    if current is not None and current.uid == identity.uid:
        await manager.refresh_after_write()

    return RegisterResponse(identity=identity, profile=profile)


@router.post("/logout")
async def logout(
    response: Response,
    manager: SessionManagerDep,
    paths: ViewPaths = Depends(get_view_paths),
    state: SessionState = Depends(require_user),
) -> dict:
    """
    Sign out and clear the session.

    Raises:
        401: If the caller isn't the signed-in user
        502: If the provider fails to sign out (session left unchanged)
    """
    await manager.sign_out()
    response.delete_cookie(SESSION_COOKIE)
    return {"message": "Signed out", "redirect_to": paths.home}


@router.get("/session", response_model=SessionResponse)
async def session_status(
    response: Response,
    manager: SessionManagerDep,
    caller_uid: str | None = Depends(get_caller_uid),
) -> SessionResponse:
    """
    Current session snapshot plus the session hint.

    Never fails: while the session is loading it reports `loading: true`.
    The hint is mirrored to a `session` cookie for the UI's first paint.
    Callers without a token for the signed-in identity see a signed-out
    session.
    """
    state = state_for_caller(manager.session.state, caller_uid)
    hint = manager.hint.is_active()

    if hint:
        response.set_cookie(
            SESSION_COOKIE,
            "true",
            max_age=int(settings.session_hint_ttl.total_seconds()),
            httponly=False,
            samesite="lax",
        )
    elif not state.loading:
        response.delete_cookie(SESSION_COOKIE)

    return SessionResponse(
        loading=state.loading,
        authenticated=state.is_authenticated,
        is_admin=state.is_admin,
        resolving=state.resolving,
        identity=state.identity,
        profile=state.profile,
        error=state.error,
        session_hint=hint,
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(state: SessionState = Depends(require_user)) -> UserResponse:
    """
    Get the signed-in user's identity and profile.

    Raises:
        401: If nobody is signed in
        503: While the session is loading
    """
    return UserResponse(identity=state.identity, profile=state.profile, is_admin=state.is_admin)
