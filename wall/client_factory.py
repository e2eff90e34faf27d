"""
Backend client construction.

The CLI is responsible for dependency creation: it builds WallSettings once,
creates a ClientProvider, and threads the provider (or the client it yields)
into the repository, the real‑time bridge, and the controller. There is no
module‑level client.

Fallback policy
---------------
When SUPABASE_URL or the anon key is missing, or the SDK fails to build a
client, the behavior depends on WallSettings.fallback_policy:

    • degrade (default)   log a warning and return a DisabledClient; every
                          operation then reports "Supabase not configured"
    • fail-fast           raise ConfigurationError immediately
"""

import asyncio
import logging
from typing import Optional, cast

from supabase import acreate_client

from wall.config import FallbackPolicy, WallSettings
from wall.errors import ConfigurationError
from wall.supabase import DisabledClient
from wall.supabase_client import SupabaseBackend
from wall.types import BackendClient

logger = logging.getLogger(__name__)


def _fallback(settings: WallSettings, reason: str) -> BackendClient:
    if settings.fallback_policy is FallbackPolicy.FAIL_FAST:
        raise ConfigurationError(reason)

    logger.warning("%s; using disabled client", reason)
    return DisabledClient()


async def create_backend_client(settings: WallSettings) -> BackendClient:
    """
    Build the backend client selected by `settings`.

    Returns
    -------
    BackendClient
        A SupabaseBackend when configuration is complete and the SDK client
        builds, otherwise a DisabledClient (degrade policy).

    Raises
    ------
    ConfigurationError
        Under the fail‑fast policy, when configuration is missing or the SDK
        client cannot be constructed.
    """
    if not settings.is_configured:
        return _fallback(
            settings,
            "Missing Supabase configuration: " + ", ".join(settings.missing),
        )

    try:
        sdk_client = await acreate_client(
            cast(str, settings.supabase_url), cast(str, settings.supabase_key)
        )
    except Exception as e:
        return _fallback(settings, f"Error creating Supabase client: {e}")

    logger.debug("Supabase client created for %s", settings.supabase_url)
    return SupabaseBackend(sdk_client, table=settings.table, bucket=settings.bucket)


class ClientProvider:
    """
    Lazily constructs and caches one backend client.

    get() is idempotent: the first call builds the client, and every later
    call returns the same object. Concurrent first calls share a single
    construction. A ConfigurationError raised under the fail‑fast policy is
    not cached, so a later call re‑reads the same settings and raises again.
    """

    def __init__(self, settings: WallSettings) -> None:
        self.settings = settings
        self._client: Optional[BackendClient] = None
        self._lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._client is not None

    async def get(self) -> BackendClient:
        if self._client is not None:
            return self._client

        async with self._lock:
            if self._client is None:
                self._client = await create_backend_client(self.settings)
        return self._client
