# =============================================================================
# app/websocket/manager.py - WebSocket Connection Manager
# =============================================================================
# Tracks the browser tabs connected to the view channel and fans events
# out to all of them.
#
# Usage:
#   from app.websocket import websocket_manager
#
#   await websocket_manager.connect(websocket)
#   await websocket_manager.broadcast({"type": "navigate", "to": "/auth/login"})
#   websocket_manager.disconnect(websocket)
#
#   # From synchronous code running on the event loop (navigator listeners)
#   websocket_manager.publish({"type": "toast", "message": "..."})
# =============================================================================

import asyncio
import logging
from typing import Any, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Manages the WebSocket connections of the view channel.

    Every connected tab gets every navigation and toast event: there is a
    single session per process, so all tabs show the same user.
    """

    def __init__(self):
        self.connections: Set[WebSocket] = set()
        # Keep references so pending broadcasts aren't garbage collected
        self._pending: Set[asyncio.Task] = set()

    async def connect(self, websocket: WebSocket) -> None:
        """
        Accept a new WebSocket connection and track it.

        Args:
            websocket: The WebSocket connection
        """
        await websocket.accept()
        self.connections.add(websocket)
        logger.info(f"View channel connected. Total connections: {len(self.connections)}")

    def disconnect(self, websocket: WebSocket) -> None:
        """
        Remove a WebSocket connection from tracking.

        Args:
            websocket: The WebSocket connection to remove
        """
        self.connections.discard(websocket)
        logger.info(f"View channel disconnected. Total connections: {len(self.connections)}")

    async def broadcast(self, message: dict[str, Any]) -> int:
        """
        Send a message to every connected tab.

        Args:
            message: The message dict to send (will be JSON encoded)

        Returns:
            int: Number of clients the message was sent to
        """
        if not self.connections:
            logger.debug(f"No view connections, skipping {message.get('type')} event")
            return 0

        dead_connections: Set[WebSocket] = set()
        sent_count = 0

        for websocket in list(self.connections):
            try:
                await websocket.send_json(message)
                sent_count += 1
            except Exception as e:
                logger.warning(f"Failed to send to WebSocket: {e}")
                dead_connections.add(websocket)

        # Clean up any dead connections
        for ws in dead_connections:
            self.connections.discard(ws)

        if dead_connections:
            logger.info(f"Cleaned up {len(dead_connections)} dead connections")

        logger.debug(f"Broadcast type={message.get('type')} to {sent_count} clients")
        return sent_count

    async def send(self, websocket: WebSocket, message: dict[str, Any]) -> bool:
        """Send a message to one tab; drops the connection if it's dead."""
        try:
            await websocket.send_json(message)
            return True
        except Exception as e:
            logger.warning(f"Failed to send to WebSocket: {e}")
            self.connections.discard(websocket)
            return False

    def publish(self, message: dict[str, Any], websocket: WebSocket | None = None) -> None:
        """
        Schedule a send from synchronous code on the event loop.

        Goes to every tab unless `websocket` is given. Skipped when no
        loop is running (e.g. during shutdown).
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running loop, dropping {message.get('type')} event")
            return
        if websocket is None:
            task = loop.create_task(self.broadcast(message))
        else:
            task = loop.create_task(self.send(websocket, message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def get_connection_count(self) -> int:
        return len(self.connections)


# Global singleton instance
websocket_manager = ConnectionManager()
