"""
Post repository: the thin data‑access layer over a BackendClient.

The repository shapes parameters (trimming, image paths, ordering) and
turns BackendResponse dicts into small result tuples. It holds no state
beyond the injected client and never raises for backend failures; only
invalid input raises ValueError.
"""

import logging
import uuid
from pathlib import PurePath
from typing import List, NamedTuple, Optional, cast

from wall.config import DEFAULT_BUCKET
from wall.errors import is_not_configured
from wall.types import MAX_BODY_LENGTH, BackendClient, PostRecord, sort_posts

logger = logging.getLogger(__name__)


class FetchResult(NamedTuple):
    posts: List[PostRecord]
    error: Optional[str] = None

    @property
    def not_configured(self) -> bool:
        return is_not_configured(self.error)


class UploadResult(NamedTuple):
    url: Optional[str]
    path: Optional[str] = None
    error: Optional[str] = None


class CreateResult(NamedTuple):
    posts: List[PostRecord]
    error: Optional[str] = None

    @property
    def not_configured(self) -> bool:
        return is_not_configured(self.error)


def build_image_path(filename: str, bucket: str = DEFAULT_BUCKET) -> str:
    """
    Build a random storage path that keeps the file's extension.

    "cat.PNG" → "post-images/3f2c…9a.PNG". A file without an extension gets
    a bare random name.
    """
    suffix = PurePath(filename).suffix
    return f"{bucket}/{uuid.uuid4().hex}{suffix}"


class PostRepository:
    """
    List, insert, and attach images to posts.

    Parameters
    ----------
    client : BackendClient
        SupabaseBackend, DisabledClient, or a test fake.
    bucket : str
        Namespace prefix for uploaded image paths.
    """

    def __init__(self, client: BackendClient, bucket: str = DEFAULT_BUCKET) -> None:
        self.client = client
        self.bucket = bucket

    async def fetch_posts(self) -> FetchResult:
        """
        Return all posts newest first.

        On error the post list is empty and `error` carries the backend
        message; `not_configured` distinguishes the configuration case from
        transient failures.
        """
        resp = await self.client.list_posts()
        error = resp.get("error")
        if error:
            return FetchResult(posts=[], error=error)

        rows = cast(List[PostRecord], resp.get("data") or [])
        return FetchResult(posts=sort_posts(rows))

    async def upload_image(
        self, filename: str, data: bytes, content_type: Optional[str] = None
    ) -> UploadResult:
        """
        Store an image and resolve its public URL.

        Parameters
        ----------
        filename : str
            Original file name; only its extension is kept.
        data : bytes
            Raw image content.
        content_type : str | None
            MIME type forwarded to storage.
        """
        path = build_image_path(filename, self.bucket)
        resp = await self.client.upload_image(path, data, content_type)
        error = resp.get("error")
        if error:
            return UploadResult(url=None, path=path, error=error)

        url = await self.client.public_url_for(path)
        if not url:
            logger.warning("No public URL returned for %s", path)
        return UploadResult(url=url, path=path)

    async def create_post(self, body: str, image_url: Optional[str] = None) -> CreateResult:
        """
        Insert a post with a trimmed body and optional image URL.

        Raises
        ------
        ValueError
            If the trimmed body is empty and no image URL is given, or the
            body is longer than 280 characters.
        """
        text = body.strip()
        if not text and not image_url:
            raise ValueError("body must be provided when no image is attached")
        if len(text) > MAX_BODY_LENGTH:
            raise ValueError(f"body must be at most {MAX_BODY_LENGTH} characters")

        resp = await self.client.create_post(text, image_url)
        error = resp.get("error")
        if error:
            return CreateResult(posts=[], error=error)

        data = resp.get("data") or []
        if isinstance(data, dict):
            data = [data]
        return CreateResult(posts=cast(List[PostRecord], data))
