# =============================================================================
# core/auth/navigation.py - Navigation and Toast Channel
# =============================================================================
# Tracks which view the client is on and emits events asking it to move
# or to show a transient message.
#
# Events are plain dicts so they can go straight onto a WebSocket:
#   {"type": "navigate", "to": "/auth/login", "reason": "signed_out"}
#   {"type": "toast", "level": "error", "message": "Sign-out failed"}
# =============================================================================

import logging
from typing import Any, Callable

from .views import ViewPaths, ViewTable, normalize_path

logger = logging.getLogger(__name__)

EventListener = Callable[[dict[str, Any]], None]


class Navigator:
    """
    Current location plus navigation / toast fan-out.

    A navigation to the view the client is already on is dropped, so two
    layers reacting to the same state change produce one redirect.
    """

    def __init__(self, paths: ViewPaths, views: ViewTable | None = None):
        self.paths = paths
        self.views = views or ViewTable.default(paths)
        self._location: str | None = None
        self._listeners: list[EventListener] = []

    @property
    def location(self) -> str | None:
        return self._location

    def set_location(self, path: str) -> None:
        """Record the view the client reports it is showing."""
        self._location = normalize_path(path)

    def is_protected(self, path: str | None = None) -> bool:
        """Is `path` (default: the current location) behind a signed-in policy?"""
        return self.views.is_protected(self._location if path is None else path)

    def add_listener(self, listener: EventListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def navigate(self, target: str, reason: str) -> bool:
        """
        Move the client to `target`.

        Returns:
            False if the client is already there, True otherwise
        """
        target = normalize_path(target)
        if target == self._location:
            logger.debug(f"Already on {target}, navigation dropped ({reason})")
            return False

        logger.info(f"Navigate {self._location} -> {target} ({reason})")
        self._location = target
        event = {"type": "navigate", "to": target, "reason": reason}
        self._emit(event)
        return True

    def notify(self, message: str, level: str = "error") -> None:
        """Ask the client to show a transient message."""
        self._emit({"type": "toast", "level": level, "message": message})

    def _emit(self, event: dict[str, Any]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Navigation listener failed for {event['type']} event")
