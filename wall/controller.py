"""
WallController: state and actions behind the wall view.

The controller owns everything the view renders:

    • the ordered post list
    • the composer (message text, selected image, preview)
    • loading flags and the current error text
    • the clock used for relative timestamps

It orchestrates PostRepository for loading and posting, and exposes
handle_insert() as the callback for InsertSubscription. Every action catches
its own failures, logs them, and turns them into short user‑facing text in
`error`; nothing propagates to the caller.
"""

import base64
import logging
import mimetypes
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from wall.errors import is_not_configured
from wall.realtime import merge_insert
from wall.repository import PostRepository
from wall.timefmt import format_relative
from wall.types import MAX_BODY_LENGTH, PostRecord, is_submittable

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")
MAX_IMAGE_BYTES = 5 * 1024 * 1024

CONFIG_ERROR_MESSAGE = "App is not properly configured. Please check environment variables."


@dataclass
class ImageAttachment:
    filename: str
    data: bytes
    content_type: Optional[str] = None

    def data_url(self) -> str:
        """Inline preview of the image, as a browser FileReader would produce."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.content_type or 'application/octet-stream'};base64,{encoded}"


def load_image(path: Path) -> ImageAttachment:
    """
    Read an image file for attachment.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the extension is not an accepted image type or the file is
        larger than 5 MB.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Image file not found: {path}")

    if path.suffix.lower() not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValueError(
            f"Unsupported image type {path.suffix or '(none)'}; "
            f"expected one of {', '.join(ALLOWED_IMAGE_EXTENSIONS)}"
        )

    data = path.read_bytes()
    if len(data) > MAX_IMAGE_BYTES:
        raise ValueError(f"Image is larger than 5MB: {path}")

    content_type, _ = mimetypes.guess_type(path.name)
    return ImageAttachment(filename=path.name, data=data, content_type=content_type)


class WallController:
    """
    View state and actions for the wall.

    Parameters
    ----------
    repository : PostRepository
        Data access for posts and images.
    now : datetime | None
        Initial clock value; defaults to the current local time.
    """

    def __init__(self, repository: PostRepository, now: Optional[datetime] = None) -> None:
        self.repository = repository
        self.posts: List[PostRecord] = []
        self.message = ""
        self.error = ""
        self.config_error = False
        self.is_loading = False
        self.is_page_loading = True
        self.selected_image: Optional[ImageAttachment] = None
        self.image_preview: Optional[str] = None
        self.now = now or datetime.now().astimezone()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def is_config_error(self) -> bool:
        return self.config_error

    def _set_error(self, message: str, config: bool = False) -> None:
        self.error = message
        self.config_error = config

    @property
    def character_count(self) -> str:
        return f"{len(self.message)}/{MAX_BODY_LENGTH}"

    @property
    def can_submit(self) -> bool:
        return is_submittable(self.message, self.selected_image is not None) and not self.is_loading

    def format_date(self, created_at: str) -> str:
        return format_relative(created_at, self.now)

    def tick(self, now: Optional[datetime] = None) -> None:
        """Advance the clock used for relative timestamps."""
        self.now = now or datetime.now().astimezone()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """
        Fetch the wall.

        Any failure empties the post list rather than leaving stale posts
        on screen.
        """
        try:
            result = await self.repository.fetch_posts()
            if result.error:
                if result.not_configured:
                    self._set_error(CONFIG_ERROR_MESSAGE, config=True)
                else:
                    self._set_error(f"Failed to load posts: {result.error}")
                logger.error("Error fetching posts: %s", result.error)
                self.posts = []
            else:
                self.posts = result.posts
        except Exception:
            logger.exception("Exception in load")
            self._set_error("Exception while fetching posts")
            self.posts = []
        finally:
            self.is_page_loading = False

    def handle_insert(self, record: PostRecord) -> None:
        """InsertSubscription callback: put a pushed post at the top."""
        self.posts = merge_insert(self.posts, record)

    # ------------------------------------------------------------------
    # Composer
    # ------------------------------------------------------------------

    def set_message(self, text: str) -> None:
        self.message = text[:MAX_BODY_LENGTH]

    def select_image(self, path: Path) -> ImageAttachment:
        """Read and attach an image file. Raises like load_image()."""
        return self.attach_image(load_image(path))

    def attach_image(self, image: ImageAttachment) -> ImageAttachment:
        self.selected_image = image
        self.image_preview = image.data_url()
        return image

    def clear_image(self) -> None:
        self.selected_image = None
        self.image_preview = None

    def _reset_composer(self) -> None:
        self.message = ""
        self.clear_image()

    async def submit(self) -> bool:
        """
        Upload the selected image (if any), create the post, and reload.

        Returns True when the post was created. Returns False without doing
        anything when there is nothing to post or a submission is already
        running.
        """
        if not self.can_submit:
            return False

        self.is_loading = True
        self._set_error("")
        try:
            image_url: Optional[str] = None
            if self.selected_image is not None:
                upload = await self.repository.upload_image(
                    self.selected_image.filename,
                    self.selected_image.data,
                    self.selected_image.content_type,
                )
                if upload.error:
                    logger.error("Error uploading image: %s", upload.error)
                    if is_not_configured(upload.error):
                        self._set_error(CONFIG_ERROR_MESSAGE, config=True)
                    else:
                        self._set_error(f"Failed to upload image: {upload.error}")
                    return False
                if not upload.url:
                    self._set_error("Failed to upload image: no public URL returned")
                    return False
                image_url = upload.url

            created = await self.repository.create_post(self.message, image_url)
            if created.error:
                logger.error("Error posting: %s", created.error)
                if created.not_configured:
                    self._set_error(CONFIG_ERROR_MESSAGE, config=True)
                else:
                    self._set_error(f"Failed to post message: {created.error}")
                return False

            self._reset_composer()
            await self.load()
            return True
        except Exception:
            logger.exception("Exception in submit")
            self._set_error("Exception while posting")
            return False
        finally:
            self.is_loading = False

