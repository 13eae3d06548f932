# =============================================================================
# core/auth/store.py - Session Store
# =============================================================================
# Holds the current SessionState snapshot.
#
# SessionStore is the writable side and belongs to the session manager.
# Everything else gets a SessionView, which can read and subscribe but has
# no way to write. Request handlers narrow it further with for_caller(),
# which hides the identity from callers who can't prove they hold it.
# =============================================================================

import logging
from typing import Any, Callable

from core.models.session import SessionState

logger = logging.getLogger(__name__)

StateListener = Callable[[SessionState], None]


class SessionStore:
    """Single-writer holder of the session snapshot."""

    def __init__(self, initial: SessionState | None = None):
        self._state = initial or SessionState()
        self._listeners: list[StateListener] = []
        self.view = SessionView(self)

    @property
    def state(self) -> SessionState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, **changes: Any) -> bool:
        """
        Swap in a new snapshot with `changes` applied.

        Returns:
            False if the snapshot is unchanged (listeners are not called)

        Raises:
            ValueError: If asked to go back to loading
        """
        if changes.get("loading") and not self._state.loading:
            raise ValueError("Session cannot return to loading once resolved")

        new_state = self._state.model_copy(update=changes)
        if new_state == self._state:
            return False

        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("Session listener failed")
        return True


class SessionView:
    """Read-only access to a SessionStore."""

    __slots__ = ("_store",)

    def __init__(self, store: SessionStore):
        self._store = store

    @property
    def state(self) -> SessionState:
        return self._store.state

    @property
    def is_admin(self) -> bool:
        return self._store.state.is_admin

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        return self._store.subscribe(listener)

    def for_caller(self, uid: str | None) -> "CallerSessionView":
        """The session as seen by a caller who proved identity `uid`."""
        return CallerSessionView(self, uid)


def state_for_caller(state: SessionState, uid: str | None) -> SessionState:
    """
    Project the session onto one caller.

    The session's identity is only visible to a caller holding a verified
    token for it. Everyone else sees a signed-out session; `loading` is
    kept so they still wait for the first notification.
    """
    if state.identity is not None and state.identity.uid == uid:
        return state
    if state.identity is None and not state.resolving:
        return state
    return state.model_copy(update={"identity": None, "profile": None, "resolving": False, "error": None})


class CallerSessionView:
    """SessionView filtered through state_for_caller()."""

    __slots__ = ("_view", "uid")

    def __init__(self, view: SessionView, uid: str | None):
        self._view = view
        self.uid = uid

    @property
    def state(self) -> SessionState:
        return state_for_caller(self._view.state, self.uid)

    @property
    def is_admin(self) -> bool:
        return self.state.is_admin

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        return self._view.subscribe(lambda state: listener(state_for_caller(state, self.uid)))
