"""Backend client handle for the Supabase project the app talks to."""
from __future__ import annotations

import logging

from supabase import AsyncClient, acreate_client

from .config import get_settings
from .security.secrets import ensure_secret

logger = logging.getLogger(__name__)

_client: AsyncClient | None = None


async def create_backend_client() -> AsyncClient:
    """Return a new Supabase client configured from the runtime settings."""

    settings = get_settings()
    url = ensure_secret("SUPABASE_URL", settings.supabase_url)
    key = ensure_secret("SUPABASE_ANON_KEY", settings.supabase_anon_key)
    client = await acreate_client(url, key)
    logger.info("Connected to Supabase project at %s", url)
    return client


async def get_backend_client() -> AsyncClient:
    """Return the process-wide client, creating it on first use."""

    global _client
    if _client is None:
        _client = await create_backend_client()
    return _client


async def close_backend_client() -> None:
    """Release realtime channels and forget the process-wide client."""

    global _client
    if _client is None:
        return
    client, _client = _client, None
    await client.remove_all_channels()


__all__ = [
    "create_backend_client",
    "get_backend_client",
    "close_backend_client",
]
