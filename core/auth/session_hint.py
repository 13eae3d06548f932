# =============================================================================
# core/auth/session_hint.py - Session Hint Marker
# =============================================================================
# A small file saying "there was an active session recently". It survives
# restarts so the UI can skip the loading flash for returning users.
#
# The hint is never consulted for an access decision. The live identity
# notification always wins.
# =============================================================================

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(days=7)


class FileSessionHint:
    """
    Expiring boolean marker stored as JSON.

    File format:
        {"active": true, "expires_at": "2024-01-22T10:30:00+00:00"}
    """

    def __init__(self, path: Path | str, ttl: timedelta = DEFAULT_TTL):
        self.path = Path(path)
        self.ttl = ttl

    def mark_active(self) -> None:
        expires_at = datetime.now(timezone.utc) + self.ttl
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps({"active": True, "expires_at": expires_at.isoformat()}))
        except OSError as e:
            logger.warning(f"Could not write session hint {self.path}: {e}")

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove session hint {self.path}: {e}")

    def is_active(self) -> bool:
        try:
            data = json.loads(self.path.read_text())
            expires_at = datetime.fromisoformat(data["expires_at"])
        except FileNotFoundError:
            return False
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.debug(f"Ignoring unreadable session hint: {e}")
            return False

        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at <= datetime.now(timezone.utc):
            self.clear()
            return False
        return bool(data.get("active"))
