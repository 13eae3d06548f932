# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for the identity, profile and session models:
# - Defaults for new profiles
# - Database row parsing
# - Derived flags (is_admin, is_authenticated)
#
# Run with: pytest tests/test_models.py -v
# =============================================================================

from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from app.auth.models import RegisterRequest
from core.models import (
    Identity,
    ProfileCreate,
    ProfileUpdate,
    SessionState,
    UserProfile,
    UserRole,
    default_avatar,
)


# =============================================================================
# Identity
# =============================================================================

class TestIdentity:
    """Tests for Identity."""

    def test_from_provider_user(self):
        """Display name and avatar are read from user metadata."""
        user = SimpleNamespace(
            id="u1",
            email="alice@diu.edu.bd",
            user_metadata={"full_name": "Alice", "avatar_url": "https://cdn/alice.png"},
        )

        identity = Identity.from_provider_user(user)

        assert identity.uid == "u1"
        assert identity.email == "alice@diu.edu.bd"
        assert identity.display_name == "Alice"
        assert identity.photo_url == "https://cdn/alice.png"

    def test_from_provider_user_without_metadata(self):
        user = SimpleNamespace(id="u1", email=None, user_metadata=None)
        identity = Identity.from_provider_user(user)
        assert identity.display_name is None
        assert identity.photo_url is None

    def test_identity_is_immutable(self):
        identity = Identity(uid="u1")
        with pytest.raises(ValidationError):
            identity.uid = "u2"

    def test_empty_uid_rejected(self):
        with pytest.raises(ValidationError):
            Identity(uid="")


# =============================================================================
# UserProfile
# =============================================================================

class TestUserProfile:
    """Tests for UserProfile and its create/update payloads."""

    def test_defaults(self):
        profile = UserProfile(uid="u1")
        assert profile.role == UserRole.USER
        assert profile.level == 1
        assert profile.bio == ""
        assert profile.followers == frozenset()
        assert profile.is_admin is False

    def test_from_row(self):
        row = {
            "uid": "u1",
            "display_name": "Alice",
            "role": "admin",
            "bio": None,
            "followers": ["u2", "u3", "u2"],
            "following": None,
            "achievements": ["first_blood"],
            "created_at": "2024-01-15T10:30:00Z",
            "unknown_column": "ignored",
        }

        profile = UserProfile.from_row(row)

        assert profile.is_admin is True
        assert profile.bio == ""
        assert profile.followers == {"u2", "u3"}
        assert profile.following == frozenset()
        assert profile.created_at.year == 2024

    def test_from_row_null_role_is_user(self):
        profile = UserProfile.from_row({"uid": "u1", "role": None})
        assert profile.role == UserRole.USER

    def test_unknown_role_rejected(self):
        with pytest.raises(ValidationError):
            UserProfile(uid="u1", role="superuser")

    def test_to_row(self):
        profile = UserProfile(uid="u1", followers=frozenset({"u3", "u2"}))
        row = profile.to_row()
        assert row["followers"] == ["u2", "u3"]
        assert row["role"] == "user"

    def test_create_defaults(self):
        """New profiles get the email's local part and a generated avatar."""
        profile = ProfileCreate(email="nightowl@diu.edu.bd").build("u1")

        assert profile.display_name == "nightowl"
        assert profile.photo_url == default_avatar("u1")
        assert profile.photo_url.endswith("?seed=u1")
        assert profile.role == UserRole.USER
        assert profile.created_at == profile.updated_at

    def test_create_keeps_given_values(self):
        profile = ProfileCreate(email="a@b.c", display_name="Ace", photo_url="https://x/y.png").build("u1")
        assert profile.display_name == "Ace"
        assert profile.photo_url == "https://x/y.png"

    def test_update_only_includes_set_fields(self):
        assert ProfileUpdate(bio="GG").changes() == {"bio": "GG"}
        assert ProfileUpdate().changes() == {}


# =============================================================================
# SessionState
# =============================================================================

class TestSessionState:
    """Tests for derived session flags."""

    def test_initial_state(self):
        state = SessionState()
        assert state.loading is True
        assert state.is_authenticated is False
        assert state.is_admin is False

    def test_admin_requires_profile(self, alice):
        assert SessionState(identity=alice, loading=False).is_admin is False

    @pytest.mark.parametrize("role,expected", [(UserRole.USER, False), (UserRole.ADMIN, True)])
    def test_admin_follows_role(self, alice, role, expected):
        state = SessionState(identity=alice, profile=UserProfile(uid="u1", role=role), loading=False)
        assert state.is_admin is expected


# =============================================================================
# Sign-up form
# =============================================================================

class TestRegisterRequest:
    """Tests for the sign-up form checks."""

    def test_passwords_must_match(self):
        with pytest.raises(ValidationError, match="Passwords do not match"):
            RegisterRequest(email="a@b.c", password="secret1", confirm_password="secret2")

    def test_password_minimum_length(self):
        with pytest.raises(ValidationError):
            RegisterRequest(email="a@b.c", password="12345", confirm_password="12345")
