"""
Real‑time subscription bridge.

InsertSubscription connects the backend's change feed to an in‑memory list
of posts. Its lifecycle is:

    UNSUBSCRIBED ──start()──▶ SUBSCRIBED ──stop()──▶ UNSUBSCRIBED

start() opens one channel (default "posts") with an INSERT listener on
public.posts. Each pushed row is normalized into a PostRecord and handed to
the `on_insert` callback. stop() is a best‑effort cleanup step: failures
are logged and reported through its return value, never raised.

No reconnection or backoff is attempted here; the SDK's transport owns that.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, cast

from wall.types import BackendClient, PostRecord

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL = "posts"


class SubscriptionState(str, Enum):
    UNSUBSCRIBED = "unsubscribed"
    SUBSCRIBED = "subscribed"


def extract_record(payload: Any) -> Optional[PostRecord]:
    """
    Pull the inserted row out of a change‑feed payload.

    Accepted shapes:
        • {"new": {...}}                       (supabase-js style)
        • {"data": {"record": {...}, ...}}     (realtime-py postgres_changes)
        • {"record": {...}}
        • an object exposing `.new` or `.record`

    The row is trusted as‑is; only rows carrying an `id` are returned.
    """
    record: Any = None
    if isinstance(payload, dict):
        data = payload.get("data")
        if isinstance(payload.get("new"), dict):
            record = payload["new"]
        elif isinstance(data, dict) and isinstance(data.get("record"), dict):
            record = data["record"]
        elif isinstance(payload.get("record"), dict):
            record = payload["record"]
    else:
        record = getattr(payload, "new", None) or getattr(payload, "record", None)

    if not isinstance(record, dict) or not record.get("id"):
        return None
    return cast(PostRecord, record)


def merge_insert(posts: List[PostRecord], record: PostRecord) -> List[PostRecord]:
    """
    Prepend `record` unless a post with the same id is already present.

    A row fetched on load can also arrive through the change feed, and the
    local client's own insert is followed by both a refresh and a
    notification; deduplicating by id keeps each post on the wall once.
    """
    post_id = record.get("id")
    if any(existing.get("id") == post_id for existing in posts):
        return posts
    return [record, *posts]


class InsertSubscription:
    """
    Bridge between BackendClient.subscribe_inserts() and a callback.

    Parameters
    ----------
    client : BackendClient
        Backend providing the change feed.
    on_insert : Callable[[PostRecord], Any]
        Called once per pushed row, with the normalized record.
    channel_name : str
        Channel to open. Defaults to "posts".

    Usage
    -----
        async with InsertSubscription(client, controller.handle_insert):
            ...
    """

    def __init__(
        self,
        client: BackendClient,
        on_insert: Callable[[PostRecord], Any],
        channel_name: str = DEFAULT_CHANNEL,
    ) -> None:
        self.client = client
        self.on_insert = on_insert
        self.channel_name = channel_name
        self.state = SubscriptionState.UNSUBSCRIBED
        self._handle: Any = None

    @property
    def is_subscribed(self) -> bool:
        return self.state is SubscriptionState.SUBSCRIBED

    def _dispatch(self, payload: Dict[str, Any]) -> None:
        record = extract_record(payload)
        if record is None:
            logger.warning("Ignoring change payload without a post record: %r", payload)
            return
        try:
            self.on_insert(record)
        except Exception:
            logger.exception("Error handling inserted post %s", record.get("id"))

    async def start(self) -> bool:
        """
        Open the channel and begin listening.

        Returns True once subscribed. Setup errors are logged and leave the
        bridge UNSUBSCRIBED (returns False). Calling start() while already
        subscribed is a no‑op.
        """
        if self.is_subscribed:
            return True

        try:
            self._handle = await self.client.subscribe_inserts(self.channel_name, self._dispatch)
        except Exception:
            logger.exception("Error setting up real-time subscription")
            self._handle = None
            return False

        self.state = SubscriptionState.SUBSCRIBED
        return True

    async def stop(self) -> bool:
        """
        Remove the channel.

        Returns False when removal failed; the error is logged and the
        bridge still ends UNSUBSCRIBED.
        """
        if not self.is_subscribed:
            return True

        handle, self._handle = self._handle, None
        self.state = SubscriptionState.UNSUBSCRIBED
        try:
            await self.client.unsubscribe(handle)
        except Exception:
            logger.exception("Error removing channel %r", self.channel_name)
            return False
        return True

    async def __aenter__(self) -> "InsertSubscription":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()
