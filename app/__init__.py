# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the FastAPI web application:
# - main.py: App entry point, lifespan, middleware, error handlers
# - config.py: Environment variable loading and settings
# - auth/: Session endpoints and the HTTP access guard dependency
# - routers/: API endpoint definitions organized by feature
# - websocket/: View channel pushing navigation and toast events
#
# The app layer is thin - it handles HTTP concerns and delegates
# business logic to the core/ package.
# =============================================================================
