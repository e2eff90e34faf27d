"""
Supabase backend adapter for the Wall.

This wrapper provides a stable, typed interface over the official
supabase-py AsyncClient. It implements the BackendClient Protocol defined in
wall/types.py so the repository and the real‑time bridge never touch the
SDK's dynamic query builder directly:

    • list_posts()          select * from posts order by created_at desc
    • create_post()         insert into posts (body, image_url) returning *
    • upload_image()        storage.from_("post-images").upload(path, bytes)
    • public_url_for()      storage.from_("post-images").get_public_url(path)
    • subscribe_inserts()   channel("posts") + INSERT on public.posts
    • unsubscribe()         remove_channel(channel)

Every data operation catches SDK failures and reports them through the
`error` field of a BackendResponse, so callers check one path whether the
failure is a network error, a PostgREST rejection, or a storage error.
Channel setup and removal are allowed to raise; InsertSubscription owns
that error handling.
"""

import inspect
import logging
from typing import Any, Dict, List, Optional, cast

from supabase import AsyncClient

from wall.config import DEFAULT_BUCKET, DEFAULT_TABLE
from wall.types import BackendResponse, InsertCallback, PostRecord

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helper: normalize Supabase responses
# ---------------------------------------------------------------------------


def _extract_data(resp: Any) -> List[Dict[str, Any]]:
    """
    Normalize Supabase responses across:
        • real SDK response objects (APIResponse)
        • dict‑style responses from test doubles

    Always returns a list of row dictionaries.
    Raises RuntimeError when the response carries an error.
    """
    if isinstance(resp, dict):
        status = resp.get("status", 200)
        if status >= 400 or resp.get("error"):
            raise RuntimeError(f"Supabase error: {resp.get('error') or resp}")
        data = resp.get("data", [])
        return cast(List[Dict[str, Any]], data or [])

    error = getattr(resp, "error", None)
    if error:
        raise RuntimeError(f"Supabase error: {error}")

    data = getattr(resp, "data", None)
    if data is None:
        return []

    if isinstance(data, list):
        return cast(List[Dict[str, Any]], data)

    return [cast(Dict[str, Any], data)]


def _error_message(exc: BaseException) -> str:
    """
    Short human‑readable text for an SDK exception.

    postgrest's APIError and storage3's StorageException both expose a
    `message` attribute; anything else falls back to str().
    """
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or exc.__class__.__name__


def _public_url_from(result: Any) -> str:
    # storage3 returns a plain string; older releases returned
    # {"publicURL": ...} or {"data": {"publicUrl": ...}}.
    if isinstance(result, str):
        return result
    if isinstance(result, dict):
        nested = result.get("data")
        if isinstance(nested, dict):
            result = nested
        for key in ("publicUrl", "publicURL", "public_url"):
            value = result.get(key)
            if value:
                return str(value)
    return ""


# ---------------------------------------------------------------------------
# Main adapter class
# ---------------------------------------------------------------------------


class SupabaseBackend:
    """
    Dependency‑injected adapter around a supabase-py AsyncClient.

    Parameters
    ----------
    client : AsyncClient
        SDK client created via `acreate_client(url, key)`. Typed loosely at
        the call sites because the fake SDK used in tests does not inherit
        from AsyncClient.
    table : str
        Posts table name. Defaults to "posts".
    bucket : str
        Storage bucket for post images. Defaults to "post-images".
    """

    def __init__(
        self,
        client: AsyncClient,
        table: str = DEFAULT_TABLE,
        bucket: str = DEFAULT_BUCKET,
    ) -> None:
        self.client = client
        self.table = table
        self.bucket = bucket

    # -----------------------------------------------------------------------
    # Posts table
    # -----------------------------------------------------------------------

    async def list_posts(self) -> BackendResponse:
        """Fetch every post, newest first."""
        try:
            resp = (
                await self.client.table(self.table)
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )
            rows = cast(List[PostRecord], _extract_data(resp))
        except Exception as e:
            logger.debug("Supabase select on %s failed: %r", self.table, e)
            return {"data": [], "error": _error_message(e)}

        logger.debug("Fetched %d posts", len(rows))
        return {"data": rows, "error": None}

    async def create_post(self, body: str, image_url: Optional[str] = None) -> BackendResponse:
        """
        Insert a post row.

        PostgREST returns the inserted representation by default, so the
        response data holds the new row with its server‑assigned `id` and
        `created_at`.
        """
        record: PostRecord = {"body": body, "image_url": image_url}
        try:
            resp = await self.client.table(self.table).insert(record).execute()
            rows = cast(List[PostRecord], _extract_data(resp))
        except Exception as e:
            logger.debug("Supabase insert into %s failed: %r", self.table, e)
            return {"data": None, "error": _error_message(e)}

        return {"data": rows, "error": None}

    # -----------------------------------------------------------------------
    # Object storage
    # -----------------------------------------------------------------------

    async def upload_image(
        self, path: str, data: bytes, content_type: Optional[str] = None
    ) -> BackendResponse:
        """Upload raw image bytes to `path` inside the image bucket."""
        file_options: Dict[str, str] = {}
        if content_type:
            file_options["content-type"] = content_type

        try:
            resp = await self.client.storage.from_(self.bucket).upload(
                path, data, file_options=file_options or None
            )
        except Exception as e:
            logger.debug("Supabase upload to %s failed: %r", self.bucket, e)
            return {"data": None, "error": _error_message(e)}

        return {"data": {"path": getattr(resp, "path", path)}, "error": None}

    async def public_url_for(self, path: str) -> str:
        """Derive the public URL for a stored object."""
        try:
            result = self.client.storage.from_(self.bucket).get_public_url(path)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.error("Error resolving public URL for %s: %s", path, e)
            return ""
        return _public_url_from(result)

    # -----------------------------------------------------------------------
    # Real‑time change feed
    # -----------------------------------------------------------------------

    async def subscribe_inserts(self, channel_name: str, on_insert: InsertCallback) -> Any:
        """
        Open `channel_name` and listen for INSERT events on public.<table>.

        Returns the SDK channel, which is the handle unsubscribe() expects.
        """
        channel = self.client.channel(channel_name)
        channel.on_postgres_changes(
            "INSERT",
            schema="public",
            table=self.table,
            callback=on_insert,
        )
        await channel.subscribe()
        logger.debug("Subscribed to channel %r", channel_name)
        return channel

    async def unsubscribe(self, handle: Any) -> None:
        await self.client.remove_channel(handle)
