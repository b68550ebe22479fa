"""
Devil's Dice - Supabase Client

Thread-safe singleton factory for the Supabase client.
"""

from functools import lru_cache

from supabase import Client, create_client

from devils_dice.config.settings import get_settings


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """Create and cache a Supabase client instance."""
    settings = get_settings()
    if not settings.has_supabase:
        raise ValueError(
            "Supabase is not configured. Set DEVILS_DICE_SUPABASE_URL and "
            "DEVILS_DICE_SUPABASE_ANON_KEY."
        )
    return create_client(settings.supabase_url, settings.supabase_anon_key)
