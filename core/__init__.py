# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the portal's business logic:
# - models/: Pydantic schemas (identity, profile, session state)
# - auth/: Session manager, access guards, navigation
# - services/: Profile store and role mutation
#
# Code in this package should NOT import from FastAPI routers.
# This keeps the logic testable and reusable.
# =============================================================================
