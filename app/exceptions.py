# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the portal.
# Errors carry a machine-readable code and, where possible, a suggestion
# telling the client HOW to recover, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class PortalException(Exception):
    """
    Base exception for the DIUEC portal.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "PORTAL_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}
        self.headers = headers or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Identity Exceptions
# =============================================================================

class IdentityError(PortalException):
    """Raised when the identity provider rejects a sign-in or sign-up."""

    def __init__(self, error: str):
        super().__init__(
            message=error,
            code="IDENTITY_ERROR",
            status_code=401,
            suggestion="Check the email and password and try again",
        )


class SignOutError(PortalException):
    """Raised when the identity provider fails to sign the user out."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Sign-out failed: {error}",
            code="SIGN_OUT_FAILED",
            status_code=502,
            suggestion="Try again; the session is still active",
            details={"error": error},
        )


class SessionTimeoutError(PortalException):
    """Raised (and recorded on the session) when the provider never reports an identity."""

    def __init__(self, seconds: float):
        super().__init__(
            message=f"No identity notification received within {seconds:g}s",
            code="SESSION_TIMEOUT",
            status_code=504,
            suggestion="Continuing as signed out; sign in again once the connection recovers",
            details={"timeout_seconds": seconds},
        )


class SessionLoadingError(PortalException):
    """Raised by guarded endpoints while the session is still being resolved."""

    def __init__(self):
        super().__init__(
            message="Session is still loading",
            code="SESSION_LOADING",
            status_code=503,
            suggestion="Retry shortly",
            headers={"Retry-After": "1"},
        )


class AccessDeniedError(PortalException):
    """Raised when a guard predicate fails for the current session."""

    def __init__(self, redirect_to: str, authenticated: bool):
        super().__init__(
            message="Not allowed to access this view" if authenticated else "Sign in to access this view",
            code="ACCESS_DENIED",
            status_code=403 if authenticated else 401,
            details={"redirect_to": redirect_to},
            headers={"Location": redirect_to},
        )
        self.redirect_to = redirect_to

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["redirect_to"] = self.redirect_to
        return result


# =============================================================================
# Profile Exceptions
# =============================================================================

class ProfileLookupError(PortalException):
    """Raised when the profile store cannot be reached."""

    def __init__(self, uid: str, error: str):
        super().__init__(
            message=f"Failed to load profile: {error}",
            code="PROFILE_LOOKUP_FAILED",
            status_code=503,
            suggestion="Check the connection to the profile store and reload",
            details={"uid": uid, "error": error},
        )


class ProfileNotFoundError(PortalException):
    """Raised when a profile row doesn't exist."""

    def __init__(self, uid: str):
        super().__init__(
            message=f"Profile not found: {uid}",
            code="PROFILE_NOT_FOUND",
            status_code=404,
            suggestion="Finish sign-up so the profile is created",
            details={"uid": uid},
        )


class ProfileWriteError(PortalException):
    """Raised when creating, updating or deleting a profile fails."""

    def __init__(self, uid: str, error: str):
        super().__init__(
            message=f"Failed to write profile: {error}",
            code="PROFILE_WRITE_FAILED",
            status_code=502,
            details={"uid": uid, "error": error},
        )


# =============================================================================
# Role Exceptions
# =============================================================================

class RoleMutationError(PortalException):
    """Raised when the store rejects a role change."""

    def __init__(self, uid: str, error: str, status_code: int = 502):
        super().__init__(
            message=f"Failed to change role: {error}",
            code="ROLE_MUTATION_FAILED",
            status_code=status_code,
            suggestion="Only admins can change roles; reload the user list and try again",
            details={"uid": uid, "error": error},
        )


class BootstrapDisabledError(PortalException):
    """Raised when the one-time admin bootstrap is not available."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Admin bootstrap unavailable: {reason}",
            code="BOOTSTRAP_DISABLED",
            status_code=403,
            suggestion="Ask an existing admin to promote this account",
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def portal_exception_handler(
    request: Request,
    exc: PortalException
) -> JSONResponse:
    """
    Convert PortalException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers or None,
    )
