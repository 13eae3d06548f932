# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - profile.py: Own profile read/edit
# - admin.py: User management and admin bootstrap
# - views.py: View access resolution for the client
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import profile
from . import admin
from . import views

__all__ = [
    "health",
    "profile",
    "admin",
    "views",
]
