# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the DIUEC portal API.
# It configures the FastAPI application with the session lifespan,
# middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import PortalException, portal_exception_handler
from app.routers import admin, health, profile, views
from app.auth import routes as auth_routes
from app.websocket import websocket_manager
from app.websocket import routes as websocket_routes
from core.auth import FileSessionHint, Navigator, SessionManager, ViewPaths
from core.services import ProfileService
from lib.identity_provider import SupabaseIdentityProvider
from lib.supabase_client import SupabaseClient

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def build_session_manager() -> tuple[SessionManager, Navigator]:
    """Wire the session manager to Supabase and the view channel."""
    navigator = Navigator(ViewPaths.from_settings(settings))
    navigator.add_listener(websocket_manager.publish)

    manager = SessionManager(
        provider=SupabaseIdentityProvider(),
        profiles=ProfileService(),
        hint=FileSessionHint(settings.session_hint_file, ttl=settings.session_hint_ttl),
        navigator=navigator,
        init_timeout=settings.AUTH_INIT_TIMEOUT_SECONDS,
    )
    return manager, navigator


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: subscribe the session manager to the identity provider
    - Shutdown: unsubscribe and cancel any in-flight profile lookup
    """
    logger.info(f"Starting DIUEC portal in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    manager, navigator = build_session_manager()
    app.state.session_manager = manager
    app.state.navigator = navigator
    await manager.start()

    yield

    logger.info("Shutting down DIUEC portal")
    await manager.stop()
    SupabaseClient.reset()


# Create FastAPI application
app = FastAPI(
    title="DIUEC Portal API",
    description="""
## University Esports Community Portal

Profiles, posts, galleries, tournaments and teams for the campus esports
club, backed by Supabase.

### Sessions

The server holds one signed-in session. Clients:

1. **Check the session** - `GET /api/v1/auth/session`
2. **Sign in** - `POST /api/v1/auth/login`
3. **Resolve a view** - `GET /api/v1/views/resolve?path=/dashboard`
4. **Follow redirects** - connect to `/ws/views` for navigation events

### Access policies

| Policy | Allowed when | Otherwise |
|--------|--------------|-----------|
| public | always | - |
| authenticated | signed in | login |
| admin | signed in as admin | login / configured target |
| guest_only | signed out | landing |
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Sign-in, sign-up, sign-out and the current session",
        },
        {
            "name": "Profile",
            "description": "The signed-in user's profile",
        },
        {
            "name": "Admin",
            "description": "User management and admin bootstrap",
        },
        {
            "name": "Views",
            "description": "Access decisions for client views",
        },
        {
            "name": "WebSocket",
            "description": "Navigation and toast events",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - credentials are only shared with the configured origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(PortalException)
async def handle_portal_exception(request: Request, exc: PortalException):
    """Handle custom portal exceptions."""
    return await portal_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1",
)

# Own profile endpoints
app.include_router(
    profile.router,
    prefix="/api/v1",
    tags=["Profile"]
)

# Admin endpoints
app.include_router(
    admin.router,
    prefix="/api/v1",
    tags=["Admin"]
)

# View resolution endpoints
app.include_router(
    views.router,
    prefix="/api/v1",
    tags=["Views"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# WebSocket endpoints (navigation events)
app.include_router(
    websocket_routes.router,
    tags=["WebSocket"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "DIUEC Portal API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
