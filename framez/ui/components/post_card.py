"""Interaction model behind a single post card: like toggle and lazy comment thread."""
from __future__ import annotations

import logging
from typing import Awaitable, Callable

from supabase import AsyncClient

from ...errors import BackendRequestError, ValidationError
from ...schemas import CommentRow, ViewPost
from ...services.post_service import create_post_comment, list_post_comments, set_post_like_state
from ...services.session_store import SessionStore
from .feedback import Alert, Notifier, alert_for_error

logger = logging.getLogger(__name__)

Reconcile = Callable[[], Awaitable[None]]


class PostCard:
    """Local projection of one post.

    Likes and comment counts change optimistically; after every mutation the
    owning screen re-fetches and :meth:`sync` replaces the local values with
    the authoritative ones. While a mutation is in flight :meth:`sync` only
    records the fetched row and leaves the displayed counters alone.
    """

    def __init__(
        self,
        post: ViewPost,
        *,
        client: AsyncClient,
        session: SessionStore,
        notify: Notifier,
        on_update: Reconcile | None = None,
    ) -> None:
        self.post = post
        self._client = client
        self._session = session
        self._notify = notify
        self._on_update = on_update

        self.liked = post.user_liked
        self.likes_count = post.likes_count
        self.comments_count = post.comments_count

        self.comments: list[CommentRow] = []
        self.show_comments = False
        self.loading_comments = False
        self.comment_text = ""
        self.submitting_comment = False
        self._in_flight = 0

    @property
    def post_id(self) -> str:
        return self.post.id

    @property
    def pending(self) -> bool:
        return self._in_flight > 0

    def sync(self, post: ViewPost) -> None:
        """Adopt the counters from a fresh aggregation result."""

        self.post = post
        if self._in_flight:
            return
        self.liked = post.user_liked
        self.likes_count = post.likes_count
        self.comments_count = post.comments_count

    async def _reconcile(self) -> None:
        if self._on_update is not None:
            await self._on_update()

    def _viewer_id(self, action: str) -> str | None:
        viewer = self._session.user
        if viewer is None:
            self._notify(Alert("Sign in required", f"You must sign in to {action}."))
            return None
        return viewer.id

    async def toggle_like(self) -> None:
        viewer_id = self._viewer_id("like posts")
        if viewer_id is None:
            return

        should_like = not self.liked
        self.liked = should_like
        self.likes_count = self.likes_count + 1 if should_like else max(self.likes_count - 1, 0)

        self._in_flight += 1
        try:
            await set_post_like_state(
                self._client,
                post_id=self.post_id,
                user_id=viewer_id,
                should_like=should_like,
            )
        except BackendRequestError as exc:
            self._notify(alert_for_error(exc))
        finally:
            self._in_flight -= 1
        await self._reconcile()

    async def open_comments(self) -> None:
        self.show_comments = True
        await self.load_comments()

    def close_comments(self) -> None:
        self.show_comments = False

    async def load_comments(self) -> None:
        self.loading_comments = True
        try:
            self.comments = await list_post_comments(self._client, post_id=self.post_id)
        except BackendRequestError as exc:
            self._notify(alert_for_error(exc))
        finally:
            self.loading_comments = False

    @property
    def can_submit_comment(self) -> bool:
        return bool(self.comment_text.strip()) and not self.submitting_comment

    async def submit_comment(self) -> None:
        if not self.can_submit_comment:
            return
        viewer = self._session.user
        if viewer is None:
            self._notify(Alert("Sign in required", "You must sign in to comment."))
            return

        self.submitting_comment = True
        try:
            await create_post_comment(
                self._client,
                post_id=self.post_id,
                author=viewer,
                content=self.comment_text,
            )
        except (BackendRequestError, ValidationError) as exc:
            self._notify(alert_for_error(exc))
            return
        finally:
            self.submitting_comment = False

        self.comment_text = ""
        self.comments_count += 1
        await self.load_comments()
        await self._reconcile()

    def share(self) -> None:
        logger.info("Share requested for post %s", self.post_id)


__all__ = ["PostCard", "Reconcile"]
