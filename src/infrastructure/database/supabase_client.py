from __future__ import annotations

import logging
import os

from supabase import Client, create_client

logger = logging.getLogger(__name__)


def supabase_enabled() -> bool:
    """True when Supabase credentials are configured and not switched off."""
    if os.getenv("SUPABASE_DISABLED", "0") == "1":
        return False
    return bool(os.getenv("SUPABASE_URL") and os.getenv("SUPABASE_ANON_KEY"))


def new_supabase_client() -> Client | None:
    """Create a fresh client, or None to fall back to the in-memory backends.

    Each request that carries its own user token needs its own client so the
    session of one user never leaks into another user's PostgREST headers.
    """
    if not supabase_enabled():
        return None
    logger.debug("Creating Supabase client for %s", os.environ["SUPABASE_URL"])
    return create_client(os.environ["SUPABASE_URL"], os.environ["SUPABASE_ANON_KEY"])


def profile_table() -> str:
    return os.getenv("PROFILE_TABLE", "user_profiles")
