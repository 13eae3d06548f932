# =============================================================================
# tests/test_role_service.py - Role Mutation Tests
# =============================================================================

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from app.exceptions import BootstrapDisabledError, ProfileNotFoundError, RoleMutationError
from core.models import SessionState, UserProfile, UserRole
from core.services import RoleService
from tests.fakes import FakeProfileStore


class TestChangeRole:
    """Tests for admin promote/demote."""

    def test_promote(self, user_profile):
        profiles = FakeProfileStore(user_profile)
        RoleService(profiles).change_role("u1", UserRole.ADMIN)
        assert profiles.profiles["u1"].role == UserRole.ADMIN

    def test_rejected_write_propagates(self, user_profile):
        profiles = FakeProfileStore(user_profile)
        profiles.role_error = RoleMutationError("u1", "permission denied", status_code=403)

        with pytest.raises(RoleMutationError) as exc_info:
            RoleService(profiles).change_role("u1", UserRole.ADMIN)

        assert exc_info.value.status_code == 403
        # Nothing changed locally
        assert profiles.profiles["u1"].role == UserRole.USER


class TestBootstrapAdmin:
    """Tests for the one-time admin bootstrap."""

    def test_first_admin(self, alice, user_profile):
        profiles = FakeProfileStore(user_profile)
        state = SessionState(loading=False, identity=alice, profile=user_profile)

        assert RoleService(profiles).bootstrap_admin(state) is True
        assert profiles.role_writes == [("u1", UserRole.ADMIN)]

    def test_refused_when_an_admin_exists(self, alice, user_profile):
        profiles = FakeProfileStore(user_profile, UserProfile(uid="u9", role=UserRole.ADMIN))
        state = SessionState(loading=False, identity=alice, profile=user_profile)

        with pytest.raises(BootstrapDisabledError):
            RoleService(profiles).bootstrap_admin(state)
        assert profiles.role_writes == []

    def test_refused_when_disabled(self, alice, user_profile):
        profiles = FakeProfileStore(user_profile)
        state = SessionState(loading=False, identity=alice, profile=user_profile)

        with pytest.raises(BootstrapDisabledError):
            RoleService(profiles, bootstrap_enabled=False).bootstrap_admin(state)

    def test_requires_identity(self):
        with pytest.raises(BootstrapDisabledError):
            RoleService(FakeProfileStore()).bootstrap_admin(SessionState(loading=False))

    def test_requires_profile(self, alice):
        state = SessionState(loading=False, identity=alice)
        with pytest.raises(ProfileNotFoundError):
            RoleService(FakeProfileStore()).bootstrap_admin(state)

    def test_existing_admin_is_noop(self, alice, admin_profile):
        profiles = FakeProfileStore(admin_profile)
        state = SessionState(loading=False, identity=alice, profile=admin_profile)

        assert RoleService(profiles).bootstrap_admin(state) is False
        assert profiles.role_writes == []

    def test_does_not_trust_admin_count(self, alice, user_profile):
        """The store decides; a stale admin count can't let a second admin in."""

        class StaleCountStore(FakeProfileStore):
            def count_admins(self):
                return 0

        profiles = StaleCountStore(user_profile, UserProfile(uid="u9", role=UserRole.ADMIN))
        state = SessionState(loading=False, identity=alice, profile=user_profile)

        with pytest.raises(BootstrapDisabledError):
            RoleService(profiles).bootstrap_admin(state)
        assert profiles.profiles["u1"].role == UserRole.USER

    def test_concurrent_claims_make_one_admin(self, alice, bob, user_profile):
        bob_profile = UserProfile(uid="u2", display_name="Bob")
        profiles = FakeProfileStore(user_profile, bob_profile)
        roles = RoleService(profiles)
        start = threading.Barrier(2)

        def claim(state):
            start.wait(timeout=5)
            try:
                return roles.bootstrap_admin(state)
            except BootstrapDisabledError:
                return False

        states = [
            SessionState(loading=False, identity=alice, profile=user_profile),
            SessionState(loading=False, identity=bob, profile=bob_profile),
        ]
        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(claim, states))

        assert sorted(results) == [False, True]
        assert profiles.count_admins() == 1
