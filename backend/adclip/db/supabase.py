"""
Supabase client wrapper for server-side operations.
Uses service role key for admin operations.
"""
from functools import lru_cache

from supabase import Client, create_client

from ..config import Settings


class SupabaseClient:
    """Holds the service-role Supabase client."""

    def __init__(self, url: str | None = None, key: str | None = None):
        supabase_url = url or Settings.SUPABASE_URL
        supabase_key = key or Settings.SUPABASE_SERVICE_ROLE_KEY

        if not supabase_url:
            raise ValueError("SUPABASE_URL environment variable is required")
        if not supabase_key:
            raise ValueError("SUPABASE_SERVICE_ROLE_KEY environment variable is required")

        try:
            self._client = create_client(supabase_url, supabase_key)
        except Exception as e:
            raise ValueError(f"Failed to create Supabase client: {str(e)}") from e

    @property
    def client(self) -> Client:
        """Get the Supabase client instance."""
        return self._client


@lru_cache(maxsize=1)
def get_supabase() -> SupabaseClient:
    """Get the shared Supabase client."""
    return SupabaseClient()
