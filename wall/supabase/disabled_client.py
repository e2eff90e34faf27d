# wall/supabase/disabled_client.py

import logging
from typing import Any, Optional

from wall.errors import NOT_CONFIGURED
from wall.types import BackendResponse, InsertCallback

logger = logging.getLogger(__name__)


class DisabledClient:
    """
    A no‑op stand‑in for the real Supabase backend.

    Selected by create_backend_client() when SUPABASE_URL or the anon key is
    missing (or client construction fails) under the "degrade" policy. It
    exposes the same BackendClient surface as SupabaseBackend so the
    repository, the real‑time bridge, and the controller never branch on
    configuration state.

    Behavior
    --------
    Every data operation resolves immediately with the NOT_CONFIGURED error:

      • list_posts()        → data [],   error "Supabase not configured"
      • create_post()       → data None, error "Supabase not configured"
      • upload_image()      → data None, error "Supabase not configured"
      • public_url_for()    → ""
      • subscribe_inserts() → None (nothing is ever delivered)
      • unsubscribe()       → no‑op

    Nothing here raises, and no network access is attempted.
    """

    async def list_posts(self) -> BackendResponse:
        return {"data": [], "error": NOT_CONFIGURED}

    async def create_post(self, body: str, image_url: Optional[str] = None) -> BackendResponse:
        return {"data": None, "error": NOT_CONFIGURED}

    async def upload_image(
        self, path: str, data: bytes, content_type: Optional[str] = None
    ) -> BackendResponse:
        return {"data": None, "error": NOT_CONFIGURED}

    async def public_url_for(self, path: str) -> str:
        return ""

    async def subscribe_inserts(self, channel_name: str, on_insert: InsertCallback) -> Any:
        logger.debug("Real-time disabled; channel %r not opened", channel_name)
        return None

    async def unsubscribe(self, handle: Any) -> None:
        return None
