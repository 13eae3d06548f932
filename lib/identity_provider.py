# =============================================================================
# lib/identity_provider.py - Identity Provider Adapter
# =============================================================================
# Narrow interface over the external identity provider:
#
#   subscribe(callback) -> unsubscribe
#   sign_in(email, password) -> Identity
#   sign_up(email, password, display_name) -> Identity
#   sign_out() -> None
#   access_token() -> str | None
#
# The Supabase implementation reports the current session immediately on
# subscribe and then forwards every auth state change. Callbacks may run
# on whatever thread the Supabase client uses; consumers must not assume
# they are on the event loop.
# =============================================================================

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from app.exceptions import IdentityError, SignOutError
from core.models.identity import Identity
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

IdentityCallback = Callable[[Optional[Identity]], None]
Unsubscribe = Callable[[], None]


class IdentityProvider(ABC):
    """Interface for the external authentication service."""

    @abstractmethod
    def subscribe(self, callback: IdentityCallback) -> Unsubscribe:
        """Register for identity changes; returns a function that cancels the subscription."""

    @abstractmethod
    def sign_in(self, email: str, password: str) -> Identity:
        """Authenticate with credentials. Raises IdentityError on rejection."""

    @abstractmethod
    def sign_up(self, email: str, password: str, display_name: str | None = None) -> Identity:
        """Create a new identity. Raises IdentityError on rejection."""

    @abstractmethod
    def sign_out(self) -> None:
        """End the provider session. Raises SignOutError on failure."""

    @abstractmethod
    def access_token(self) -> str | None:
        """Bearer token of the provider session, or None when signed out."""


def _identity_from_session(session: Any) -> Identity | None:
    user = getattr(session, "user", None) if session is not None else None
    if user is None:
        return None
    return Identity.from_provider_user(user)


class SupabaseIdentityProvider(IdentityProvider):
    """
    Supabase Auth implementation.

    Example:
        provider = SupabaseIdentityProvider()
        unsubscribe = provider.subscribe(lambda identity: print(identity))
        provider.sign_in("player@diu.edu.bd", "secret123")
        unsubscribe()
    """

    def __init__(self, client: Any | None = None):
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = SupabaseClient.get_client()
        return self._client

    def subscribe(self, callback: IdentityCallback) -> Unsubscribe:
        def on_change(event: Any, session: Any) -> None:
            logger.debug(f"Auth state change: {event}")
            callback(_identity_from_session(session))

        subscription = self.client.auth.on_auth_state_change(on_change)

        # Report the restored session (or its absence) right away so the
        # subscriber never waits for a change that may never come.
        try:
            current = self.client.auth.get_session()
        except Exception as e:
            logger.warning(f"Could not read current auth session: {e}")
            current = None
        callback(_identity_from_session(current))

        return subscription.unsubscribe

    def sign_in(self, email: str, password: str) -> Identity:
        try:
            response = self.client.auth.sign_in_with_password({
                "email": email,
                "password": password,
            })
        except Exception as e:
            logger.warning(f"Sign-in failed for {email}: {e}")
            message = str(e) or "An error occurred during sign in"
            if "Invalid login credentials" in message:
                message = "Invalid email or password"
            raise IdentityError(message) from e

        if response.user is None:
            raise IdentityError("Invalid email or password")

        logger.info(f"Signed in: {response.user.id}")
        return Identity.from_provider_user(response.user)

    def sign_up(self, email: str, password: str, display_name: str | None = None) -> Identity:
        credentials: dict[str, Any] = {"email": email, "password": password}
        if display_name:
            credentials["options"] = {"data": {"display_name": display_name}}

        try:
            response = self.client.auth.sign_up(credentials)
        except Exception as e:
            logger.warning(f"Sign-up failed for {email}: {e}")
            raise IdentityError(str(e) or "An error occurred during sign up") from e

        if response.user is None:
            raise IdentityError("Sign up did not return a user")

        logger.info(f"Signed up: {response.user.id}")
        return Identity.from_provider_user(response.user)

    def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        except Exception as e:
            logger.warning(f"Sign-out failed: {e}")
            raise SignOutError(str(e) or "An error occurred during sign out") from e
        logger.info("Signed out")

    def access_token(self) -> str | None:
        try:
            session = self.client.auth.get_session()
        except Exception as e:
            logger.warning(f"Could not read current auth session: {e}")
            return None
        return getattr(session, "access_token", None)
