"""Supabase client initialization."""

from functools import lru_cache

from supabase import Client, create_client

from app.core.config import get_settings


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """
    Get the service-role Supabase client (cached singleton).

    Used for the documents, messages and waitlist tables and, when no
    JWT secret is configured, for resolving access tokens.

    Raises:
        RuntimeError: If client initialization fails
    """
    settings = get_settings()
    try:
        return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    except Exception as e:
        raise RuntimeError(f"Failed to initialize Supabase client: {e}") from e
