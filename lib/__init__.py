# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains the adapters for the external backend:
# - supabase_client.py: Process-wide Supabase client
# - identity_provider.py: Identity provider interface + Supabase Auth adapter
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.identity_provider import IdentityProvider, SupabaseIdentityProvider

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Identity
    "IdentityProvider",
    "SupabaseIdentityProvider",
]
