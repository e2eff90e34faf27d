"""
wall/types.py

Centralized type definitions for the Wall application.

This module defines the TypedDicts and Protocols shared by the backend
adapters, the repository layer, the real‑time bridge, and the test fakes.
Keeping them in one place gives:

    • a single source of truth for the `posts` row shape
    • a clear contract between the controller, repository, and backend
    • easy dependency injection of fake backends in tests

When the `posts` table changes in Supabase, this file should be updated first.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol, TypedDict

MAX_BODY_LENGTH = 280


# ---------------------------------------------------------------------------
# PostRecord
# ---------------------------------------------------------------------------
# Represents a single row of the `posts` table.
#
# `id` and `created_at` are assigned by the server. total=False allows the
# insert payload (body + image_url only) to use the same type.
# ---------------------------------------------------------------------------
class PostRecord(TypedDict, total=False):
    id: str
    user_id: Optional[str]
    body: str
    image_url: Optional[str]
    created_at: str


# ---------------------------------------------------------------------------
# BackendResponse
# ---------------------------------------------------------------------------
# Normalized result of a backend call. Backend operations never raise; they
# report failures through `error` so callers have a single checking path for
# "not configured", network failures, and backend rejections alike.
# ---------------------------------------------------------------------------
class BackendResponse(TypedDict, total=False):
    data: Any
    error: Optional[str]


InsertCallback = Callable[[Dict[str, Any]], Any]


# ---------------------------------------------------------------------------
# BackendClient
# ---------------------------------------------------------------------------
# Capability set used by PostRepository and InsertSubscription.
#
# Two implementations exist:
#   • SupabaseBackend  (wall/supabase_client.py)        real hosted backend
#   • DisabledClient   (wall/supabase/disabled_client.py)  "not configured"
#
# The Protocol is structural, so the in‑memory fakes under tests/fixtures
# satisfy it without inheriting from anything.
# ---------------------------------------------------------------------------
class BackendClient(Protocol):
    async def list_posts(self) -> BackendResponse:
        """Return all posts ordered by `created_at` descending."""
        ...

    async def create_post(self, body: str, image_url: Optional[str] = None) -> BackendResponse:
        """Insert a post and return the inserted row(s)."""
        ...

    async def upload_image(
        self, path: str, data: bytes, content_type: Optional[str] = None
    ) -> BackendResponse:
        """Store an image object at `path` in the image bucket."""
        ...

    async def public_url_for(self, path: str) -> str:
        """Return the public URL of a stored object, or "" when unavailable."""
        ...

    async def subscribe_inserts(self, channel_name: str, on_insert: InsertCallback) -> Any:
        """Open a channel delivering INSERT events on the posts table."""
        ...

    async def unsubscribe(self, handle: Any) -> None:
        """Remove a channel previously returned by subscribe_inserts()."""
        ...


# ---------------------------------------------------------------------------
# Timestamp helpers
# ---------------------------------------------------------------------------
def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a Supabase ISO 8601 timestamp into an aware datetime.

    Naive values are treated as UTC. Returns None for missing or unparsable
    input instead of raising, because pushed real‑time rows are not
    re‑validated.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_posts(posts: List[PostRecord]) -> List[PostRecord]:
    """
    Return posts ordered by `created_at` descending.

    The sort is stable, so equal timestamps keep the backend's order.
    Rows without a usable timestamp are placed last.
    """
    floor = datetime.min.replace(tzinfo=timezone.utc)

    def _key(post: PostRecord) -> datetime:
        return parse_timestamp(post.get("created_at")) or floor

    return sorted(posts, key=_key, reverse=True)


def is_submittable(body: str, has_image: bool) -> bool:
    """A post needs a non‑blank body or an attached image."""
    return bool(body.strip()) or has_image
