# =============================================================================
# core/auth/ - Session and Access Control
# =============================================================================
# - session_manager.py: identity subscription + session state machine
# - store.py: single-writer session store, its read-only view and the
#   per-caller projection
# - guards.py: policy evaluation and the mounted AccessGuard
# - views.py: access policies and the view table
# - navigation.py: current location, navigation and toast events
# - session_hint.py: persisted, non-authoritative session marker
# =============================================================================

from .guards import AccessGuard, GuardDecision, GuardOutcome, evaluate_access
from .navigation import Navigator
from .session_hint import FileSessionHint
from .session_manager import SessionManager
from .store import CallerSessionView, SessionStore, SessionView, state_for_caller
from .views import AccessPolicy, ViewPaths, ViewRule, ViewTable

__all__ = [
    "AccessGuard",
    "AccessPolicy",
    "CallerSessionView",
    "FileSessionHint",
    "GuardDecision",
    "GuardOutcome",
    "Navigator",
    "SessionManager",
    "SessionStore",
    "SessionView",
    "ViewPaths",
    "ViewRule",
    "ViewTable",
    "evaluate_access",
    "state_for_caller",
]
