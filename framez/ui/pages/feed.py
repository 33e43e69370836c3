"""Home feed screen: every post, newest first, kept live."""
from __future__ import annotations

from ...constants import COMMENTS_TABLE, LIKES_TABLE, POSTS_TABLE
from ...schemas import ViewPost
from ...services.post_service import list_feed_records
from ...services.realtime import TableWatch
from .post_list import PostListScreen


class FeedScreen(PostListScreen):
    channel_name = "posts_changes"
    load_error_title = "Couldn't load feed"
    empty_message = "No posts yet. Be the first to share!"

    async def load_posts(self) -> list[ViewPost]:
        return await list_feed_records(self._client, viewer_id=self.viewer_id)

    def table_watches(self) -> list[TableWatch]:
        return [TableWatch(POSTS_TABLE), TableWatch(LIKES_TABLE), TableWatch(COMMENTS_TABLE)]


__all__ = ["FeedScreen"]
