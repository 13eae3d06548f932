# =============================================================================
# app/auth/dependencies.py - FastAPI Access Guard Dependencies
# =============================================================================
# The HTTP form of the access guard. Each protected endpoint declares the
# policy it needs; the dependency evaluates it against the live session as
# seen by the caller.
#
# The caller proves who they are with their Supabase access token:
# - ES256 (new Supabase JWT signing keys) via JWKS
# - HS256 (legacy Supabase JWT secret) as fallback
# A caller without a valid token for the session's identity is treated as
# signed out.
#
#   loading -> 503 SESSION_LOADING (Retry-After: 1)
#   deny    -> 401 / 403 ACCESS_DENIED with redirect_to + Location header
#   render  -> the SessionState is handed to the endpoint
#
# Usage:
#   from app.auth import require_admin
#
#   @router.get("/admin/users")
#   async def list_users(state: SessionState = Depends(require_admin)):
#       ...
# =============================================================================

import logging
import time
from functools import lru_cache
from typing import Any, Callable, Optional

import httpx
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.config import settings
from app.dependencies import get_session_manager
from app.exceptions import AccessDeniedError, SessionLoadingError
from core.auth import (
    AccessPolicy,
    GuardDecision,
    SessionManager,
    ViewPaths,
    ViewTable,
    evaluate_access,
    state_for_caller,
)
from core.models.session import SessionState

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor; public views must work without one
security_optional = HTTPBearer(auto_error=False)

# Cache for JWKS keys
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour


# =============================================================================
# Access Tokens
# =============================================================================

def _get_jwks_url() -> str:
    return f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"


def _fetch_jwks() -> dict:
    """Fetch JWKS from Supabase with caching."""
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()
    if _jwks_cache and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        jwks_url = _get_jwks_url()
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = current_time
        logger.debug(f"Fetched JWKS from {jwks_url}")
        return _jwks_cache
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # Serve the expired copy rather than nothing
        if _jwks_cache:
            return _jwks_cache
        return {"keys": []}


def _get_signing_key(token: str) -> tuple[Any, str]:
    """
    Get the key and algorithm to verify `token` with.

    Raises:
        JWTError: If the header can't be read or no JWKS key matches
    """
    header = jwt.get_unverified_header(token)
    alg = header.get("alg", "HS256")
    kid = header.get("kid")

    if alg == "HS256":
        return settings.SUPABASE_JWT_SECRET, "HS256"

    if kid:
        for key in _fetch_jwks().get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    raise JWTError(f"No signing key for alg={alg}, kid={kid}")


def verify_access_token(token: str) -> str:
    """
    Verify a Supabase access token.

    Returns:
        The token's subject (the identity uid)

    Raises:
        ExpiredSignatureError: If the token has expired
        JWTError: If the signature, audience or subject is invalid
    """
    signing_key, algorithm = _get_signing_key(token)
    payload = jwt.decode(token, signing_key, algorithms=[algorithm], audience="authenticated")

    uid = payload.get("sub")
    if not uid:
        raise JWTError("missing 'sub' claim")
    return uid


def get_caller_uid(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional),
) -> str | None:
    """
    Identity uid proven by the request's bearer token.

    Returns:
        The uid, or None if there is no token or it doesn't verify
    """
    if credentials is None:
        return None

    try:
        uid = verify_access_token(credentials.credentials)
    except ExpiredSignatureError:
        logger.warning("Access token has expired")
        return None
    except JWTError as e:
        logger.warning(f"Access token rejected: {e}")
        return None

    logger.debug(f"Request authenticated as {uid}")
    return uid


# =============================================================================
# Session
# =============================================================================

@lru_cache
def get_view_paths() -> ViewPaths:
    return ViewPaths.from_settings(settings)


def get_session_state(
    manager: SessionManager = Depends(get_session_manager),
    caller_uid: str | None = Depends(get_caller_uid),
) -> SessionState:
    """Current session snapshot, as seen by the caller."""
    return state_for_caller(manager.session.state, caller_uid)


# =============================================================================
# Guards
# =============================================================================

def require_access(
    policy: AccessPolicy,
    failure_target: str | None = None,
) -> Callable[..., SessionState]:
    """
    Build a dependency enforcing `policy`.

    Args:
        policy: Access policy for the endpoint
        failure_target: Where to send visitors who fail the policy
            (see evaluate_access for the defaults)

    Returns:
        Dependency returning the SessionState when access is granted
    """

    def dependency(
        state: SessionState = Depends(get_session_state),
        paths: ViewPaths = Depends(get_view_paths),
    ) -> SessionState:
        outcome = evaluate_access(policy, state, paths, failure_target)

        if outcome.decision == GuardDecision.LOADING:
            raise SessionLoadingError()

        if outcome.decision == GuardDecision.DENY:
            logger.debug(f"{policy.value} guard denied request; redirect_to={outcome.redirect_to}")
            raise AccessDeniedError(outcome.redirect_to, authenticated=state.identity is not None)

        return state

    return dependency


def require_view(path: str) -> Callable[..., SessionState]:
    """
    Guard an API area with the same rule as the view at `path`.

    A visitor refused by the API is sent where the view would send them.
    """
    rule = ViewTable.default(get_view_paths()).resolve(path)
    return require_access(rule.policy, rule.failure_target)


require_user = require_access(AccessPolicy.AUTHENTICATED)
require_admin = require_view("/admin")
require_guest = require_access(AccessPolicy.GUEST_ONLY)
