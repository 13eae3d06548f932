# =============================================================================
# core/auth/session_manager.py - Session Manager
# =============================================================================
# Single source of truth for "who is signed in and what is their role".
#
# The manager subscribes once to the identity provider. Notifications can
# arrive on any thread; they are put on an asyncio queue and applied one
# at a time, in arrival order, by a single worker task:
#
#   identity    -> look up profile -> (identity, profile) + session hint
#   None        -> clear everything, remove hint, leave protected views
#
# Only this class writes the session store. Guards and routes read it
# through `manager.session`.
#
# Usage:
#   manager = SessionManager(provider, profiles, hint, navigator)
#   await manager.start()
#   manager.session.state.is_admin
#   await manager.stop()
# =============================================================================

import asyncio
import contextlib
import logging
from typing import Callable, Optional

from app.exceptions import IdentityError, ProfileLookupError, SessionTimeoutError, SignOutError
from core.models.identity import Identity
from core.models.profile import UserProfile
from core.models.session import SessionState
from core.services.profile_service import ProfileService
from lib.identity_provider import IdentityProvider

from .navigation import Navigator
from .session_hint import FileSessionHint
from .store import SessionStore, SessionView

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Owns the session state machine and the identity subscription.

    Args:
        provider: Identity provider to subscribe to
        profiles: Profile store used for role lookups
        hint: Persisted "has an active session" marker
        navigator: Where navigation and toast side effects go
        init_timeout: Seconds to wait for the first notification before
            continuing as signed out (None waits forever)
    """

    def __init__(
        self,
        provider: IdentityProvider,
        profiles: ProfileService,
        hint: FileSessionHint,
        navigator: Navigator,
        init_timeout: float | None = 10.0,
    ):
        self.provider = provider
        self.profiles = profiles
        self.hint = hint
        self.navigator = navigator
        self.init_timeout = init_timeout

        self._store = SessionStore()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue: asyncio.Queue[Optional[Identity]] | None = None
        self._worker: asyncio.Task | None = None
        self._timeout_task: asyncio.Task | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._started = False
        self.notifications_received = 0
        self.lookups = 0

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    @property
    def session(self) -> SessionView:
        return self._store.view

    @property
    def state(self) -> SessionState:
        return self._store.state

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """
        Subscribe to the identity provider.

        Raises:
            RuntimeError: If the manager was already started
        """
        if self._started:
            raise RuntimeError("SessionManager is already subscribed to the identity provider")
        self._started = True

        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._worker = asyncio.create_task(self._drain(), name="session-notifications")
        if self.init_timeout is not None:
            self._timeout_task = asyncio.create_task(self._expire_initial_load(), name="session-init-timeout")

        self._unsubscribe = self.provider.subscribe(self._on_identity_change)
        logger.info("Session manager subscribed to identity provider")

    async def stop(self) -> None:
        """Unsubscribe and cancel any in-flight work."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        for task in (self._timeout_task, self._worker):
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        self._timeout_task = None
        self._worker = None
        logger.info("Session manager stopped")

    async def wait_idle(self) -> None:
        """Wait until every queued notification has been applied."""
        if self._queue is not None:
            await self._queue.join()

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    def _on_identity_change(self, identity: Identity | None) -> None:
        """Provider callback. May run on any thread."""
        loop = self._loop
        if loop is None or loop.is_closed() or self._queue is None:
            logger.debug("Identity notification after shutdown ignored")
            return
        loop.call_soon_threadsafe(self._queue.put_nowait, identity)

    async def _drain(self) -> None:
        assert self._queue is not None
        while True:
            identity = await self._queue.get()
            try:
                await self._apply(identity)
            except Exception as e:
                logger.exception("Failed to apply identity notification")
                self._settle_after_failure(identity, str(e))
            finally:
                self._queue.task_done()

    async def _apply(self, identity: Identity | None) -> None:
        self.notifications_received += 1

        if identity is None:
            self._apply_signed_out()
            return

        current = self._store.state
        same_identity = current.identity is not None and current.identity.uid == identity.uid
        if same_identity and current.profile is not None:
            # Repeated notification (token refresh, duplicate initial event)
            self._store.update(identity=identity, loading=False)
            return

        self._store.update(identity=identity, profile=None, resolving=True, error=None)
        logger.debug(f"Resolving profile for {identity.uid}")

        try:
            profile = await self._lookup(identity.uid)
        except ProfileLookupError as e:
            logger.warning(f"Profile lookup failed for {identity.uid}: {e.message}")
            if self._is_current(identity.uid):
                self._store.update(identity=identity, profile=None, resolving=False, loading=False, error=e.message)
            return

        if not self._is_current(identity.uid):
            # sign_out() ran while the lookup was in flight.
            logger.debug(f"Discarding profile lookup for {identity.uid}; identity changed")
            return

        if profile is None:
            logger.info(f"Identity {identity.uid} has no profile yet")
            self._store.update(identity=identity, profile=None, resolving=False, loading=False)
            return

        self._store.update(identity=identity, profile=profile, resolving=False, loading=False, error=None)
        self.hint.mark_active()
        logger.info(f"Signed in as {identity.uid} (role={profile.role.value})")

        if self.navigator.location == self.navigator.paths.login:
            self.navigator.navigate(self.navigator.paths.landing, reason="signed_in")

    def _apply_signed_out(self) -> None:
        was_signed_in = self._store.state.identity is not None
        self._store.update(identity=None, profile=None, resolving=False, loading=False)
        self.hint.clear()
        if was_signed_in:
            logger.info("Signed out")

        if self.navigator.is_protected():
            self.navigator.navigate(self.navigator.paths.login, reason="unauthenticated")

    def _settle_after_failure(self, identity: Identity | None, error: str) -> None:
        """Leave loading / resolving after a notification that could not be applied."""
        if identity is not None and not self._is_current(identity.uid):
            return
        state = self._store.state
        if not (state.loading or state.resolving):
            return
        self._store.update(resolving=False, loading=False, error=f"Failed to apply identity change: {error}")

    def _is_current(self, uid: str) -> bool:
        current = self._store.state.identity
        return current is not None and current.uid == uid

    async def _lookup(self, uid: str) -> UserProfile | None:
        self.lookups += 1
        return await asyncio.to_thread(self.profiles.get_profile, uid)

    async def _expire_initial_load(self) -> None:
        await asyncio.sleep(self.init_timeout)
        if self.notifications_received or not self._store.state.loading:
            return

        error = SessionTimeoutError(self.init_timeout)
        logger.warning(error.message)
        self._store.update(identity=None, profile=None, resolving=False, loading=False, error=error.message)
        self.navigator.notify(error.message, level="warning")

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def sign_in(self, email: str, password: str) -> Identity:
        """
        Sign in with credentials.

        The session itself changes when the provider's notification
        arrives, not here.

        Raises:
            IdentityError: If the provider rejects the credentials
        """
        try:
            return await asyncio.to_thread(self.provider.sign_in, email, password)
        except IdentityError as e:
            self.navigator.notify(e.message)
            raise

    async def sign_out(self) -> None:
        """
        Sign out, clear the session and go home.

        Raises:
            SignOutError: If the provider call fails; the session is left
                as it was and the next notification reconciles it
        """
        try:
            await asyncio.to_thread(self.provider.sign_out)
        except SignOutError as e:
            self.navigator.notify(e.message)
            raise

        self._store.update(identity=None, profile=None, resolving=False, loading=False, error=None)
        self.hint.clear()
        self.navigator.navigate(self.navigator.paths.home, reason="signed_out")

    async def refresh_profile(self) -> UserProfile | None:
        """
        Re-read the current identity's profile (after a role or profile edit).

        Raises:
            ProfileLookupError: If the store can't be reached
        """
        identity = self._store.state.identity
        if identity is None:
            return None

        profile = await self._lookup(identity.uid)

        if not self._is_current(identity.uid):
            # Signed out or switched while the lookup was in flight.
            return profile
        self._store.update(profile=profile, resolving=False, error=None)
        if profile is not None:
            self.hint.mark_active()
        return profile

    async def refresh_after_write(self) -> bool:
        """
        refresh_profile() for callers whose store write already committed.

        A failed re-read is logged and left for the next notification or
        refresh to reconcile.

        Returns:
            False if the profile could not be re-read
        """
        try:
            await self.refresh_profile()
        except ProfileLookupError as e:
            logger.warning(f"Profile refresh after write failed for {e.details.get('uid')}: {e.message}")
            return False
        return True
