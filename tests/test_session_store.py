# =============================================================================
# tests/test_session_store.py - Session Store Tests
# =============================================================================

import pytest

from core.auth import SessionStore, SessionView, state_for_caller
from core.models import SessionState


class TestSessionStore:
    """Tests for the single-writer store."""

    def test_update_notifies_listeners(self, alice):
        store = SessionStore()
        seen = []
        store.subscribe(seen.append)

        assert store.update(identity=alice) is True

        assert seen == [store.state]
        assert store.state.identity == alice

    def test_identical_update_is_noop(self):
        store = SessionStore()
        seen = []
        store.subscribe(seen.append)

        store.update(loading=False)
        assert store.update(loading=False) is False
        assert len(seen) == 1

    def test_cannot_return_to_loading(self):
        store = SessionStore(initial=SessionState(loading=False))
        with pytest.raises(ValueError):
            store.update(loading=True)
        assert store.state.loading is False

    def test_unsubscribe(self):
        store = SessionStore()
        seen = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()
        unsubscribe()

        store.update(loading=False)
        assert seen == []

    def test_failing_listener_does_not_block_others(self):
        store = SessionStore()
        seen = []

        def broken(_state):
            raise RuntimeError("boom")

        store.subscribe(broken)
        store.subscribe(seen.append)
        store.update(loading=False)

        assert len(seen) == 1


class TestSessionView:
    """Tests for the read-only view."""

    def test_view_reads_current_state(self, alice, admin_profile):
        store = SessionStore()
        view = store.view
        store.update(identity=alice, profile=admin_profile, loading=False)

        assert isinstance(view, SessionView)
        assert view.state is store.state
        assert view.is_admin is True

    def test_view_has_no_write_access(self):
        view = SessionStore().view
        assert not hasattr(view, "update")
        with pytest.raises(AttributeError):
            view.extra = 1


class TestCallerView:
    """Tests for the per-caller projection of the session."""

    def test_owner_sees_session(self, alice, admin_profile):
        state = SessionState(loading=False, identity=alice, profile=admin_profile)
        assert state_for_caller(state, "u1") is state

    @pytest.mark.parametrize("uid", [None, "u2"])
    def test_others_see_signed_out(self, alice, admin_profile, uid):
        state = SessionState(loading=False, identity=alice, profile=admin_profile, error="stale")

        seen = state_for_caller(state, uid)

        assert seen.identity is None
        assert seen.profile is None
        assert seen.is_admin is False
        assert seen.error is None
        assert seen.loading is False

    def test_loading_is_kept(self, alice):
        state = SessionState(identity=alice, resolving=True)

        seen = state_for_caller(state, None)

        assert seen.loading is True
        assert seen.resolving is False

    def test_view_projects_notifications(self, alice, admin_profile):
        store = SessionStore()
        anonymous = store.view.for_caller(None)
        owner = store.view.for_caller("u1")
        seen = []
        anonymous.subscribe(seen.append)

        store.update(identity=alice, profile=admin_profile, loading=False)

        assert owner.is_admin is True
        assert anonymous.is_admin is False
        assert seen[-1].identity is None
