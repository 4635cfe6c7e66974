# supabase_client.py — Supabase Auth access through the official SDK

import logging

from supabase import create_client, Client
from config import SUPABASE_URL, SUPABASE_ANON_KEY

logger = logging.getLogger(__name__)


def get_supabase_client() -> Client:
    """
    Build a Supabase client with the anonymous key (limited permissions).
    A fresh client per call: auth lookups are request-scoped.
    """
    if not SUPABASE_URL or not SUPABASE_ANON_KEY:
        raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must be set in environment variables")
    return create_client(SUPABASE_URL, SUPABASE_ANON_KEY)


def get_user_from_token(access_token: str):
    """
    Resolve a Supabase access token to its user, or None when the token is
    rejected. Configuration problems propagate.
    """
    supabase = get_supabase_client()
    try:
        response = supabase.auth.get_user(access_token)
    except Exception as e:
        logger.info("Supabase rejected access token: %s", e)
        return None
    return response.user if response else None
