# =============================================================================
# core/services/profile_service.py - Profile Store
# =============================================================================
# Reads and writes the profiles table (one row per identity, keyed by uid).
# Every call is synchronous; async callers run it in a worker thread.
#
# Access rules live in the database: a non-admin session can read profiles
# and edit its own row, only admins can change roles or delete rows.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from app.config import settings
from app.exceptions import (
    ProfileLookupError,
    ProfileNotFoundError,
    ProfileWriteError,
    RoleMutationError,
)
from core.models.profile import ProfileCreate, ProfileUpdate, UserProfile, UserRole
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

CLAIM_FIRST_ADMIN_FN = "claim_first_admin"


def _is_permission_error(error: Exception) -> bool:
    text = str(error).lower()
    return "permission denied" in text or "42501" in text or "row-level security" in text


def _parse_row(uid: str, row: dict[str, Any]) -> UserProfile:
    try:
        return UserProfile.from_row(row)
    except ValidationError as e:
        logger.error(f"Malformed profile row for {uid}: {e.error_count()} invalid field(s)")
        raise ProfileLookupError(uid, f"malformed profile row ({e.error_count()} invalid field(s))") from e


class ProfileService:
    """
    Service for profile store operations.

    Example:
        profiles = ProfileService()
        profile = profiles.get_profile("550e8400-...")
        profiles.set_role("550e8400-...", UserRole.ADMIN)
    """

    def __init__(self, client: Any | None = None, table: str | None = None):
        self._client = client
        self.table = table or settings.PROFILES_TABLE

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = SupabaseClient.get_client()
        return self._client

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_profile(self, uid: str) -> UserProfile | None:
        """
        Fetch the profile for an identity.

        Returns:
            The profile, or None if no row exists yet

        Raises:
            ProfileLookupError: If the store can't be reached or the row
                doesn't hold a valid profile
        """
        try:
            response = (
                self.client.table(self.table)
                .select("*")
                .eq("uid", uid)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise ProfileLookupError(uid, str(e)) from e

        rows = response.data or []
        if not rows:
            logger.debug(f"No profile row for {uid}")
            return None
        return _parse_row(uid, rows[0])

    def list_profiles(self, limit: int = 50, offset: int = 0) -> list[UserProfile]:
        """List profiles, newest first."""
        try:
            response = (
                self.client.table(self.table)
                .select("*")
                .order("created_at", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
        except Exception as e:
            raise ProfileLookupError("*", str(e)) from e

        return [_parse_row(row.get("uid", "?"), row) for row in response.data or []]

    def count_profiles(self) -> int:
        return self._count()

    def count_admins(self) -> int:
        return self._count(role=UserRole.ADMIN)

    def _count(self, role: UserRole | None = None) -> int:
        query = self.client.table(self.table).select("uid", count="exact")
        if role is not None:
            query = query.eq("role", role.value)
        try:
            response = query.limit(1).execute()
        except Exception as e:
            raise ProfileLookupError("*", str(e)) from e
        return response.count or 0

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create_profile(self, uid: str, initial: ProfileCreate) -> UserProfile:
        """
        Insert the profile row for a freshly signed-up identity.

        Raises:
            ProfileWriteError: If the insert fails
        """
        profile = initial.build(uid)
        try:
            response = (
                self.client.table(self.table)
                .insert(profile.to_row())
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to create profile {uid}: {e}")
            raise ProfileWriteError(uid, str(e)) from e

        logger.info(f"Created profile: {uid}")
        if response.data:
            return UserProfile.from_row(response.data[0])
        return profile

    def update_profile(self, uid: str, changes: ProfileUpdate) -> UserProfile:
        """
        Apply user-editable changes to a profile.

        Raises:
            ProfileNotFoundError: If the row doesn't exist
            ProfileWriteError: If the update fails
        """
        data = changes.changes()
        data["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            response = (
                self.client.table(self.table)
                .update(data)
                .eq("uid", uid)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to update profile {uid}: {e}")
            raise ProfileWriteError(uid, str(e)) from e

        if not response.data:
            raise ProfileNotFoundError(uid)
        logger.info(f"Updated profile: {uid} ({', '.join(sorted(data))})")
        return UserProfile.from_row(response.data[0])

    def set_role(self, uid: str, role: UserRole) -> None:
        """
        Change the role stored on a profile.

        Raises:
            RoleMutationError: If the write is rejected or no row matched
        """
        try:
            response = (
                self.client.table(self.table)
                .update({
                    "role": role.value,
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                })
                .eq("uid", uid)
                .execute()
            )
        except Exception as e:
            status_code = 403 if _is_permission_error(e) else 502
            raise RoleMutationError(uid, str(e), status_code=status_code) from e

        # Rows hidden by access rules come back as an empty update.
        if not response.data:
            raise RoleMutationError(uid, "no profile updated", status_code=404)
        logger.info(f"Set role of {uid} to {role.value}")

    def claim_first_admin(self, uid: str) -> bool:
        """
        Promote `uid` to admin only if no admin exists, as one database call.

        The `claim_first_admin` function (supabase/migrations) takes a table
        lock, checks for an existing admin and updates the row in the same
        transaction, so two concurrent claims can't both succeed.

        Returns:
            True if `uid` became the first admin, False if an admin already exists

        Raises:
            RoleMutationError: If the call is rejected or no row matched
        """
        try:
            response = self.client.rpc(CLAIM_FIRST_ADMIN_FN, {"target_uid": uid}).execute()
        except Exception as e:
            status_code = 403 if _is_permission_error(e) else 502
            raise RoleMutationError(uid, str(e), status_code=status_code) from e

        result = response.data
        if result is None:
            raise RoleMutationError(uid, "no profile updated", status_code=404)
        claimed = bool(result)
        if claimed:
            logger.info(f"Set role of {uid} to {UserRole.ADMIN.value} (first admin)")
        return claimed

    def delete_profile(self, uid: str) -> None:
        """
        Hard-delete a profile row (admin "delete user").

        Raises:
            ProfileNotFoundError: If no row matched
            ProfileWriteError: If the delete fails
        """
        try:
            response = (
                self.client.table(self.table)
                .delete()
                .eq("uid", uid)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to delete profile {uid}: {e}")
            raise ProfileWriteError(uid, str(e)) from e

        if not response.data:
            raise ProfileNotFoundError(uid)
        logger.info(f"Deleted profile: {uid}")
