# =============================================================================
# app/websocket/routes.py - WebSocket Routes
# =============================================================================
# View channel: the browser tells the server which view it is showing, the
# server guards that view for as long as the tab stays on it.
#
# Connect: ws://host/ws/views?token={jwt}
#
# The token is optional; without one (or for a different identity than the
# signed-in one) the tab is guarded as signed out. Each connection tracks
# its own location, so one tab's view never cancels another tab's redirect.
#
# Client -> server:
#   {"type": "view", "path": "/admin/users"}
#   "ping"
#
# Server -> client:
#   {"type": "connected", "loading": true}
#   {"type": "outcome", "path": "/admin/users", "decision": "deny", "redirect_to": "/dashboard"}
#   {"type": "navigate", "to": "/auth/login", "reason": "unauthenticated"}
#   {"type": "toast", "level": "error", "message": "..."}
# =============================================================================

import json
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from jose import JWTError

from app.auth.dependencies import verify_access_token
from app.config import settings
from app.websocket.manager import websocket_manager
from core.auth import AccessGuard, GuardOutcome, Navigator

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_view_message(data: str) -> str | None:
    try:
        message = json.loads(data)
    except json.JSONDecodeError:
        return None
    if not isinstance(message, dict) or message.get("type") != "view":
        return None
    path = message.get("path")
    return path if isinstance(path, str) and path else None


@router.websocket("/ws/views")
async def view_websocket(
    websocket: WebSocket,
    token: str | None = Query(None, description="Supabase access token"),
):
    """
    WebSocket endpoint guarding the view a tab is showing.

    Each {"type": "view"} message replaces the tab's guard: the previous
    guard (and any redirect it had pending) is closed first.
    """
    caller_uid = None
    if token is not None:
        try:
            caller_uid = verify_access_token(token)
        except JWTError as e:
            logger.warning(f"WebSocket auth failed: {e}")
            await websocket.close(code=4001, reason="Invalid token")
            return

    manager = websocket.app.state.session_manager
    shared_navigator = websocket.app.state.navigator
    session = manager.session.for_caller(caller_uid)

    # This tab's location. Redirects decided by the session manager
    # (shared navigator) move it too.
    navigator = Navigator(shared_navigator.paths, shared_navigator.views)
    navigator.add_listener(lambda event: websocket_manager.publish(event, websocket=websocket))

    def follow(event: dict) -> None:
        if event["type"] == "navigate":
            navigator.set_location(event["to"])

    stop_following = shared_navigator.add_listener(follow)

    await websocket_manager.connect(websocket)
    guard: AccessGuard | None = None

    def push_outcome(outcome: GuardOutcome) -> None:
        websocket_manager.publish({
            "type": "outcome",
            "path": guard.location if guard else None,
            "decision": outcome.decision.value,
            "redirect_to": outcome.redirect_to,
        }, websocket=websocket)

    try:
        await websocket.send_json({"type": "connected", "loading": session.state.loading})

        while True:
            try:
                data = await websocket.receive_text()

                if data == "ping":
                    await websocket.send_text("pong")
                    continue

                path = _parse_view_message(data)
                if path is None:
                    logger.debug(f"WebSocket received: {data[:100]}")
                    continue

                if guard is not None:
                    guard.close()

                navigator.set_location(path)
                rule = navigator.views.resolve(path)
                guard = AccessGuard(
                    rule.policy,
                    session,
                    navigator,
                    location=path,
                    failure_target=rule.failure_target,
                    redirect_delay=settings.guard_redirect_delay,
                    on_render=push_outcome,
                )
                guard.mount()

            except WebSocketDisconnect:
                raise
            except Exception as e:
                logger.warning(f"WebSocket receive error: {e}")
                break

    except WebSocketDisconnect:
        logger.info("View channel client disconnected")
    finally:
        stop_following()
        if guard is not None:
            guard.close()
        websocket_manager.disconnect(websocket)
