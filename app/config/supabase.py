"""Supabase connection and client management."""

import asyncio
from typing import Optional

from supabase import AsyncClient, PostgrestAPIError, acreate_client

from app.settings import settings
from app.utils.logging_config import logger

_supabase_admin_client: Optional[AsyncClient] = None
_supabase_admin_lock = asyncio.Lock()


async def supabase_admin() -> AsyncClient:
    global _supabase_admin_client
    async with _supabase_admin_lock:
        if _supabase_admin_client is None:
            _supabase_admin_client = await acreate_client(
                settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY
            )
    return _supabase_admin_client


async def check_supabase_connection():
    """
    Checks the connection to Supabase by reading a single profile row.
    Raises an exception if the connection fails.
    """
    try:
        supabase_client = await supabase_admin()
        await supabase_client.table("profiles").select("id").limit(1).execute()
        logger.info("Supabase connection successful")
    except PostgrestAPIError as e:
        logger.error(f"Supabase connection error: {e}")
        raise


async def close_supabase_admin() -> None:
    """Close the admin client's PostgREST session, if one was opened."""
    global _supabase_admin_client
    async with _supabase_admin_lock:
        if _supabase_admin_client is None:
            return
        try:
            await _supabase_admin_client.postgrest.aclose()
            logger.info("Supabase client closed")
        except Exception as e:
            logger.error(f"Error closing Supabase client: {e}")
        _supabase_admin_client = None
