"""Supabase client initialization."""

from functools import lru_cache

from supabase import Client, ClientOptions, create_client

from activation_engine.core.config import get_settings


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """
    Shared Supabase client for every collaborator read and the audit writes.

    PostgREST calls are bounded by SUPABASE_TIMEOUT_SECONDS so a slow
    directory read cannot outlive the request deadline.

    Raises:
        RuntimeError: If client initialization fails
    """
    settings = get_settings()
    try:
        return create_client(
            settings.SUPABASE_URL,
            settings.SUPABASE_SERVICE_ROLE_KEY,
            options=ClientOptions(postgrest_client_timeout=settings.SUPABASE_TIMEOUT_SECONDS),
        )
    except Exception as e:
        raise RuntimeError(f"Supabase client unavailable for {settings.SUPABASE_URL}: {e}") from e
