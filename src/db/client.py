"""Supabase client initialization.

The client is the database handle passed opaquely to the conversation engine.
"""

from supabase import Client, create_client

from src.config import Settings, get_settings


def get_supabase_client(settings: Settings | None = None) -> Client:
    """Create the Supabase client shared by all requests."""
    settings = settings or get_settings()
    return create_client(settings.supabase_url, settings.supabase_service_key)
