# =============================================================================
# core/services/role_service.py - Role Mutation
# =============================================================================
# Admin promote/demote and the one-time admin bootstrap.
#
# Who may change a role is decided by the profile store's access rules;
# this service only forwards the write and reports failures. Nothing is
# changed locally: callers re-fetch the profile after a successful write.
# =============================================================================

import logging

from app.exceptions import BootstrapDisabledError, ProfileNotFoundError
from core.models.profile import UserRole
from core.models.session import SessionState
from core.services.profile_service import ProfileService

logger = logging.getLogger(__name__)


class RoleService:
    """
    Service for role changes.

    Example:
        roles = RoleService(ProfileService(), bootstrap_enabled=True)
        roles.change_role("550e8400-...", UserRole.ADMIN)
    """

    def __init__(self, profiles: ProfileService, bootstrap_enabled: bool = True):
        self.profiles = profiles
        self.bootstrap_enabled = bootstrap_enabled

    def change_role(self, target_uid: str, new_role: UserRole) -> None:
        """
        Promote or demote a profile.

        Raises:
            RoleMutationError: If the store rejects the write
        """
        self.profiles.set_role(target_uid, new_role)
        logger.info(f"Role of {target_uid} changed to {new_role.value}")

    def bootstrap_admin(self, state: SessionState) -> bool:
        """
        Promote the signed-in user to admin during first-run setup.

        Allowed only while bootstrap is enabled and no admin exists yet.

        Returns:
            True if the role was changed, False if the caller already is an admin

        Raises:
            BootstrapDisabledError: If bootstrap is off, nobody is signed in,
                or an admin already exists
            ProfileNotFoundError: If the caller has no profile row
            RoleMutationError: If the store rejects the write
        """
        if not self.bootstrap_enabled:
            raise BootstrapDisabledError("disabled by configuration")
        if state.identity is None:
            raise BootstrapDisabledError("sign in first")

        uid = state.identity.uid
        profile = self.profiles.get_profile(uid)
        if profile is None:
            raise ProfileNotFoundError(uid)
        if profile.role == UserRole.ADMIN:
            return False

        # The "no admin yet" check happens inside the store, together with
        # the write.
        if not self.profiles.claim_first_admin(uid):
            logger.warning(f"Bootstrap refused for {uid}: an admin already exists")
            raise BootstrapDisabledError("an admin already exists")

        logger.warning(f"Bootstrapped first admin: {uid}")
        return True
