"""Post composer screen."""
from __future__ import annotations

import logging

from supabase import AsyncClient

from ...errors import BackendRequestError, EmptyPostError, ValidationError
from ...services.post_service import create_post_record
from ...services.session_store import SessionStore
from ...services.storage_service import ImageSource
from ..components.feedback import Alert, Notifier, alert_for_error

logger = logging.getLogger(__name__)


class CreatePostScreen:
    """Holds the draft text and image; a failed submit keeps both so the viewer can retry."""

    def __init__(self, client: AsyncClient, session: SessionStore, notify: Notifier) -> None:
        self._client = client
        self._session = session
        self._notify = notify
        self.content = ""
        self.image: ImageSource | None = None
        self.loading = False

    @property
    def submit_label(self) -> str:
        return "Posting..." if self.loading else "Share Post"

    @property
    def image_label(self) -> str:
        return "Change Image" if self.image is not None else "Add Image"

    def set_content(self, text: str) -> None:
        self.content = text

    def pick_image(self, image: ImageSource) -> None:
        self.image = image

    def remove_image(self) -> None:
        self.image = None

    async def submit(self) -> bool:
        if self.loading:
            return False
        if not self.content.strip() and self.image is None:
            self._notify(alert_for_error(EmptyPostError()))
            return False
        author = self._session.user
        if author is None:
            self._notify(Alert("Sign in required", "You must sign in to share a post."))
            return False

        self.loading = True
        try:
            await create_post_record(self._client, author=author, content=self.content, image=self.image)
        except (BackendRequestError, ValidationError) as exc:
            self._notify(alert_for_error(exc))
            return False
        finally:
            self.loading = False

        self._notify(Alert("Success", "Post created successfully!"))
        self.content = ""
        self.image = None
        return True


__all__ = ["CreatePostScreen"]
