# =============================================================================
# app/websocket/__init__.py - WebSocket Module
# =============================================================================
# Pushes navigation and toast events to connected browser tabs.
#
# Usage:
#   from app.websocket import websocket_manager
#
#   navigator.add_listener(websocket_manager.publish)
# =============================================================================

from app.websocket.manager import websocket_manager, ConnectionManager

__all__ = [
    "websocket_manager",
    "ConnectionManager",
]
