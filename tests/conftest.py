# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides in-memory identity provider / profile store fakes
# - Provides a session manager wired to those fakes
# - Provides API clients with and without alice's access token
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-at-least-32-characters")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

from core.auth import FileSessionHint, Navigator, SessionManager, ViewPaths
from core.models import Identity, UserProfile, UserRole
from tests.fakes import FakeIdentityProvider, FakeProfileStore, bearer


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def paths():
    """The default login / home / landing views."""
    return ViewPaths()


@pytest.fixture
def navigator(paths):
    """Navigator recording every emitted event in `navigator.events`."""
    nav = Navigator(paths)
    nav.events = []
    nav.add_listener(nav.events.append)
    return nav


@pytest.fixture
def hint(tmp_path):
    return FileSessionHint(tmp_path / "session_hint.json")


@pytest.fixture
def provider():
    return FakeIdentityProvider()


@pytest.fixture
def profiles():
    return FakeProfileStore()


@pytest.fixture
def manager(provider, profiles, hint, navigator):
    """Session manager wired to the fakes (not started)."""
    return SessionManager(provider, profiles, hint, navigator, init_timeout=None)


@pytest.fixture
def alice():
    return Identity(uid="u1", email="alice@diu.edu.bd", display_name="Alice")


@pytest.fixture
def bob():
    return Identity(uid="u2", email="bob@diu.edu.bd", display_name="Bob")


@pytest.fixture
def user_profile():
    return UserProfile(uid="u1", email="alice@diu.edu.bd", display_name="Alice", role=UserRole.USER)


@pytest.fixture
def admin_profile():
    return UserProfile(uid="u1", email="alice@diu.edu.bd", display_name="Alice", role=UserRole.ADMIN)


@pytest.fixture
def portal_app(manager, navigator, profiles):
    """
    The FastAPI app with the session manager and profile store replaced
    by fakes. The lifespan is not run.
    """
    from app.dependencies import get_profile_service
    from app.main import app

    app.state.session_manager = manager
    app.state.navigator = navigator
    app.dependency_overrides[get_profile_service] = lambda: profiles
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def api(portal_app):
    """TestClient sending alice's (uid u1) access token with every request."""
    from fastapi.testclient import TestClient

    return TestClient(portal_app, headers=bearer("u1"))


@pytest.fixture
def anon_api(portal_app):
    """TestClient without credentials."""
    from fastapi.testclient import TestClient

    return TestClient(portal_app)
