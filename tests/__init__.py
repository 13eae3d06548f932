# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the DIUEC portal API:
# - test_models.py: Identity / profile / session model validation
# - test_session_store.py, test_session_manager.py: session state machine
# - test_guards.py, test_navigation.py: access guards and the view table
# - test_profile_service.py, test_role_service.py: profile store and roles
# - test_identity_provider.py: Supabase Auth adapter
# - test_auth_routes.py, test_admin_routes.py: API endpoints
#
# fakes.py holds the in-memory identity provider and profile store.
#
# Run tests with: pytest
# =============================================================================
