"""Supabase client singleton"""
from typing import Optional

from supabase import Client, create_client  # type: ignore

from app import config

_supabase_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton"""
    global _supabase_client

    if _supabase_client is None:
        url = config.SUPABASE_URL
        key = config.SUPABASE_SERVICE_ROLE_KEY

        if not url or not key:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        _supabase_client = create_client(url, key)

    return _supabase_client


def reset_supabase_client():
    """Reset the Supabase client singleton (useful for testing)"""
    global _supabase_client
    _supabase_client = None


def create_auth_client() -> Client:
    """
    Create a throwaway client for password sign-in and sign-up.

    Signing in attaches the user's session to the client that made the call,
    so these calls must not go through the service-role singleton.
    """
    url = config.SUPABASE_URL
    key = config.SUPABASE_SERVICE_ROLE_KEY

    if not url or not key:
        raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

    return create_client(url, key)
