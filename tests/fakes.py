# =============================================================================
# tests/fakes.py - In-Memory Test Doubles
# =============================================================================
# Stand-ins for Supabase Auth and the profiles table.
#
# FakeIdentityProvider never reports anything on its own: tests call
# emit() to deliver a notification, from the loop or from another thread.
# =============================================================================

import asyncio
import threading
import time
from unittest.mock import MagicMock

from jose import jwt

from app.config import settings
from app.exceptions import (
    IdentityError,
    ProfileLookupError,
    ProfileNotFoundError,
    RoleMutationError,
    SignOutError,
)
from core.auth import SessionStore
from core.models import Identity, ProfileCreate, ProfileUpdate, SessionState, UserProfile, UserRole
from lib.identity_provider import IdentityProvider


class FakeIdentityProvider(IdentityProvider):
    def __init__(self):
        self.callbacks = []
        self.subscribe_count = 0
        self.unsubscribe_count = 0
        self.sign_in_error: str | None = None
        self.sign_out_error: str | None = None
        self.sign_out_calls = 0
        self.signed_up: list[Identity] = []
        self.token: str | None = None

    def subscribe(self, callback):
        self.subscribe_count += 1
        self.callbacks.append(callback)

        def unsubscribe():
            self.unsubscribe_count += 1
            if callback in self.callbacks:
                self.callbacks.remove(callback)

        return unsubscribe

    def emit(self, identity: Identity | None) -> None:
        for callback in list(self.callbacks):
            callback(identity)

    def sign_in(self, email, password):
        if self.sign_in_error:
            raise IdentityError(self.sign_in_error)
        identity = Identity(uid=f"uid-{email}", email=email)
        self.token = make_token(identity.uid)
        return identity

    def sign_up(self, email, password, display_name=None):
        identity = Identity(uid=f"new-{len(self.signed_up) + 1}", email=email, display_name=display_name)
        self.signed_up.append(identity)
        return identity

    def sign_out(self):
        self.sign_out_calls += 1
        if self.sign_out_error:
            raise SignOutError(self.sign_out_error)
        self.token = None

    def access_token(self):
        return self.token


class FakeProfileStore:
    """
    Dict-backed profile store with the ProfileService interface.

    `gate` (a threading.Event) makes get_profile block until it is set,
    to hold a lookup in flight.
    """

    def __init__(self, *profiles: UserProfile):
        self.profiles: dict[str, UserProfile] = {p.uid: p for p in profiles}
        self.lookup_error: str | None = None
        self.role_error: RoleMutationError | None = None
        self.gate: threading.Event | None = None
        self.write_lock = threading.Lock()
        self.lookups: list[str] = []
        self.role_writes: list[tuple[str, UserRole]] = []

    def add(self, profile: UserProfile) -> None:
        self.profiles[profile.uid] = profile

    def get_profile(self, uid):
        self.lookups.append(uid)
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.lookup_error:
            raise ProfileLookupError(uid, self.lookup_error)
        return self.profiles.get(uid)

    def list_profiles(self, limit=50, offset=0):
        return list(self.profiles.values())[offset:offset + limit]

    def count_profiles(self):
        return len(self.profiles)

    def count_admins(self):
        return sum(1 for p in self.profiles.values() if p.role == UserRole.ADMIN)

    def create_profile(self, uid, initial: ProfileCreate):
        profile = initial.build(uid)
        self.profiles[uid] = profile
        return profile

    def update_profile(self, uid, changes: ProfileUpdate):
        if uid not in self.profiles:
            raise ProfileNotFoundError(uid)
        updated = self.profiles[uid].model_copy(update=changes.changes())
        self.profiles[uid] = updated
        return updated

    def set_role(self, uid, role):
        if self.role_error is not None:
            raise self.role_error
        if uid not in self.profiles:
            raise RoleMutationError(uid, "no profile updated", status_code=404)
        self.role_writes.append((uid, role))
        self.profiles[uid] = self.profiles[uid].model_copy(update={"role": role})

    def claim_first_admin(self, uid):
        if self.role_error is not None:
            raise self.role_error
        with self.write_lock:
            if uid not in self.profiles:
                raise RoleMutationError(uid, "no profile updated", status_code=404)
            if any(p.role == UserRole.ADMIN for p in self.profiles.values()):
                return False
            self.role_writes.append((uid, UserRole.ADMIN))
            self.profiles[uid] = self.profiles[uid].model_copy(update={"role": UserRole.ADMIN})
            return True

    def delete_profile(self, uid):
        if self.profiles.pop(uid, None) is None:
            raise ProfileNotFoundError(uid)


def make_token(uid: str, expires_in: int = 3600, secret: str | None = None, audience: str = "authenticated") -> str:
    """HS256 access token shaped like the ones Supabase Auth issues."""
    claims = {"sub": uid, "aud": audience, "role": "authenticated", "exp": int(time.time()) + expires_in}
    return jwt.encode(claims, secret or settings.SUPABASE_JWT_SECRET, algorithm="HS256")


def bearer(uid: str, **kwargs) -> dict[str, str]:
    """Authorization header for `uid`."""
    return {"Authorization": f"Bearer {make_token(uid, **kwargs)}"}


def make_client(data=None, count=None, error=None):
    """Supabase client whose table() / rpc() query chain ends in `data` / `count`."""
    query = MagicMock()
    for method in ("select", "eq", "limit", "order", "range", "insert", "update", "delete"):
        getattr(query, method).return_value = query
    if error is not None:
        query.execute.side_effect = error
    else:
        query.execute.return_value = MagicMock(data=data, count=count)

    client = MagicMock()
    client.table.return_value = query
    client.rpc.return_value = query
    return client, query


async def settle(manager) -> None:
    """Let queued notifications reach the manager and wait until they're applied."""
    await asyncio.sleep(0)
    await manager.wait_idle()


def resolved_store(**fields) -> SessionStore:
    """A store whose first load already finished."""
    return SessionStore(initial=SessionState(loading=False, **fields))


def use_session(manager, **fields) -> None:
    """Put an unstarted manager into a resolved session (route tests)."""
    manager._store = resolved_store(**fields)
