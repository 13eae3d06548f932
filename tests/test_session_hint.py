# =============================================================================
# tests/test_session_hint.py - Session Hint Tests
# =============================================================================

import json
from datetime import datetime, timedelta, timezone

from core.auth import FileSessionHint


class TestFileSessionHint:
    """Tests for the persisted session marker."""

    def test_missing_file_is_inactive(self, tmp_path):
        assert FileSessionHint(tmp_path / "hint.json").is_active() is False

    def test_mark_and_clear(self, tmp_path):
        hint = FileSessionHint(tmp_path / "nested" / "hint.json")

        hint.mark_active()
        assert hint.is_active() is True

        hint.clear()
        assert hint.is_active() is False
        # Clearing twice is fine
        hint.clear()

    def test_expires_after_ttl(self, tmp_path):
        hint = FileSessionHint(tmp_path / "hint.json", ttl=timedelta(seconds=-1))
        hint.mark_active()

        assert hint.is_active() is False
        assert not hint.path.exists()

    def test_default_ttl_is_seven_days(self, tmp_path):
        hint = FileSessionHint(tmp_path / "hint.json")
        hint.mark_active()

        data = json.loads(hint.path.read_text())
        expires_at = datetime.fromisoformat(data["expires_at"])
        remaining = expires_at - datetime.now(timezone.utc)
        assert timedelta(days=6, hours=23) < remaining <= timedelta(days=7)

    def test_naive_timestamp_treated_as_utc(self, tmp_path):
        path = tmp_path / "hint.json"
        future = (datetime.now(timezone.utc) + timedelta(hours=1)).replace(tzinfo=None, microsecond=0)
        path.write_text(json.dumps({"active": True, "expires_at": future.isoformat()}))

        assert FileSessionHint(path).is_active() is True

    def test_corrupt_file_is_inactive(self, tmp_path):
        path = tmp_path / "hint.json"
        path.write_text("not json")
        assert FileSessionHint(path).is_active() is False
