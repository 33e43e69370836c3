"""Profile screen: the viewer's own posts, post count and logout."""
from __future__ import annotations

from supabase import AsyncClient

from ...constants import COMMENTS_TABLE, LIKES_TABLE, POSTS_TABLE
from ...errors import BackendRequestError
from ...schemas import UserProfile, ViewPost
from ...services.post_service import list_user_post_records
from ...services.realtime import TableWatch
from ...services.session_store import SessionStore
from ..components.feedback import Notifier, alert_for_error
from ..router import Navigator, Route
from .post_list import PostListScreen


class ProfileScreen(PostListScreen):
    channel_name = "user_posts_changes"
    load_error_title = "Couldn't load profile"
    empty_message = "You haven't posted anything yet."

    def __init__(
        self,
        client: AsyncClient,
        session: SessionStore,
        notify: Notifier,
        *,
        navigate: Navigator,
    ) -> None:
        super().__init__(client, session, notify)
        self._navigate = navigate

    @property
    def user(self) -> UserProfile | None:
        return self._session.user

    @property
    def post_count(self) -> int:
        return len(self.posts)

    def can_load(self) -> bool:
        return self._session.user is not None

    async def load_posts(self) -> list[ViewPost]:
        author_id = self.viewer_id
        if author_id is None:
            return []
        return await list_user_post_records(self._client, author_id=author_id)

    def table_watches(self) -> list[TableWatch]:
        return [
            TableWatch(POSTS_TABLE, filter=f"user_id=eq.{self.viewer_id}"),
            TableWatch(LIKES_TABLE),
            TableWatch(COMMENTS_TABLE),
        ]

    def create_first_post(self) -> None:
        self._navigate(Route.CREATE)

    async def logout(self) -> bool:
        """Sign out and return to login; confirmation belongs to the renderer."""

        try:
            await self._session.logout()
        except BackendRequestError as exc:
            self._notify(alert_for_error(exc, title="Logout Failed"))
            return False
        await self.deactivate()
        self._navigate(Route.LOGIN)
        return True


__all__ = ["ProfileScreen"]
