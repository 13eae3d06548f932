# =============================================================================
# core/auth/guards.py - Access Guards
# =============================================================================
# One guard, parameterized by policy.
#
# evaluate_access() is the pure decision: render, show a loading
# indicator, or deny with a redirect target.
#
# AccessGuard is the mounted form of that decision for one view. It
# re-evaluates on every session change and schedules at most one redirect
# per denial, on a timer it cancels when the denial ends or the view goes
# away.
# =============================================================================

import asyncio
import logging
from enum import Enum
from typing import Callable

from pydantic import BaseModel, ConfigDict

from core.models.session import SessionState

from .navigation import Navigator
from .store import CallerSessionView, SessionView
from .views import AccessPolicy, ViewPaths, normalize_path

logger = logging.getLogger(__name__)


class GuardDecision(str, Enum):
    RENDER = "render"
    LOADING = "loading"
    DENY = "deny"


class GuardOutcome(BaseModel):
    """Result of evaluating a guard against a session snapshot."""

    model_config = ConfigDict(frozen=True)

    decision: GuardDecision
    redirect_to: str | None = None

    @property
    def renders_children(self) -> bool:
        return self.decision == GuardDecision.RENDER


RENDER = GuardOutcome(decision=GuardDecision.RENDER)
LOADING = GuardOutcome(decision=GuardDecision.LOADING)


def _deny(target: str) -> GuardOutcome:
    return GuardOutcome(decision=GuardDecision.DENY, redirect_to=target)


def evaluate_access(
    policy: AccessPolicy,
    state: SessionState,
    paths: ViewPaths,
    failure_target: str | None = None,
) -> GuardOutcome:
    """
    Decide what a view guarded by `policy` shows for `state`.

    `failure_target` overrides the default redirect for the policy's main
    failure: the login view for `authenticated`, the home view for an
    authenticated non-admin under `admin`, the landing view for
    `guest_only`. An `admin` guard always sends visitors without an
    identity to the login view.
    """
    if policy == AccessPolicy.PUBLIC:
        return RENDER

    if state.loading:
        return LOADING

    if policy == AccessPolicy.AUTHENTICATED:
        if state.identity is None:
            return _deny(failure_target or paths.login)
        return RENDER

    if policy == AccessPolicy.ADMIN:
        if state.identity is None:
            return _deny(paths.login)
        if state.resolving:
            return LOADING
        if not state.is_admin:
            return _deny(failure_target or paths.home)
        return RENDER

    if policy == AccessPolicy.GUEST_ONLY:
        if state.identity is not None:
            return _deny(failure_target or paths.landing)
        return RENDER

    raise ValueError(f"Unknown access policy: {policy}")


class AccessGuard:
    """
    A guard mounted on one view.

    Example:
        guard = AccessGuard(
            AccessPolicy.ADMIN,
            manager.session,
            navigator,
            location="/admin/users",
            failure_target="/dashboard",
        )
        outcome = guard.mount()
        ...
        guard.close()

    Must be mounted from inside a running event loop; redirects are
    scheduled with loop.call_later.
    """

    def __init__(
        self,
        policy: AccessPolicy,
        session: SessionView | CallerSessionView,
        navigator: Navigator,
        location: str,
        failure_target: str | None = None,
        redirect_delay: float = 0.1,
        on_render: Callable[[GuardOutcome], None] | None = None,
    ):
        self.policy = policy
        self.session = session
        self.navigator = navigator
        self.location = normalize_path(location)
        self.failure_target = failure_target
        self.redirect_delay = redirect_delay
        self.on_render = on_render

        self.outcome: GuardOutcome | None = None
        self.redirects_scheduled = 0
        self._pending: asyncio.TimerHandle | None = None
        self._unsubscribe: Callable[[], None] | None = None

    def evaluate(self) -> GuardOutcome:
        return evaluate_access(self.policy, self.session.state, self.navigator.paths, self.failure_target)

    def mount(self) -> GuardOutcome:
        """Start following the session and render once."""
        if self._unsubscribe is None:
            self._unsubscribe = self.session.subscribe(lambda _state: self.render())
        return self.render()

    def render(self) -> GuardOutcome:
        outcome = self.evaluate()
        previous = self.outcome
        self.outcome = outcome

        if outcome.decision == GuardDecision.DENY:
            if previous != outcome:
                self._schedule_redirect(outcome.redirect_to)
        else:
            self._cancel_pending()

        if self.on_render is not None and previous != outcome:
            self.on_render(outcome)
        return outcome

    def close(self) -> None:
        """Stop following the session and drop any pending redirect."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._cancel_pending()

    def _schedule_redirect(self, target: str) -> None:
        self._cancel_pending()
        loop = asyncio.get_running_loop()
        self._pending = loop.call_later(self.redirect_delay, self._fire, target)
        self.redirects_scheduled += 1
        logger.debug(f"Guard on {self.location} scheduled redirect to {target}")

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _fire(self, target: str) -> None:
        self._pending = None
        # The session may have settled or the client moved on while the
        # timer was pending.
        current = self.evaluate()
        if current.decision != GuardDecision.DENY or current.redirect_to != target:
            return
        if self.navigator.location != self.location:
            logger.debug(f"Guard on {self.location} skipped redirect; client is on {self.navigator.location}")
            return
        self.navigator.navigate(target, reason=f"{self.policy.value}_guard")
