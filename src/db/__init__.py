"""Database client layer."""

from src.db.client import get_supabase_client

__all__ = [
    "get_supabase_client",
]
