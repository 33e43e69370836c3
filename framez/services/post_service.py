"""Business logic for posts, likes and comments stored in the Supabase backend."""
from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Iterable, Mapping, Sequence

from supabase import AsyncClient

from ..constants import COMMENTS_TABLE, LIKES_TABLE, POSTS_TABLE
from ..errors import BackendRequestError, EmptyPostError, ValidationError, describe_error
from ..schemas import CommentCreate, CommentRow, PostCreate, UserProfile, ViewPost
from .storage_service import ImageSource, upload_post_image

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]


async def execute_query(query: Any, *, action: str) -> list[dict[str, Any]]:
    """Run a prepared query builder and return its rows, wrapping SDK failures."""

    try:
        response = await query.execute()
    except Exception as exc:
        logger.exception("Backend request failed while trying to %s", action)
        raise BackendRequestError(action, describe_error(exc)) from exc
    data = getattr(response, "data", None)
    if data is None:
        return []
    if isinstance(data, dict):
        return [data]
    return list(data)


def aggregate_feed(
    posts: Sequence[Row],
    likes: Iterable[Row],
    comments: Iterable[Row],
    viewer_id: str | None,
) -> list[ViewPost]:
    """Attach like/comment counters and the viewer's like state to ``posts``.

    ``posts`` keeps the order the backend returned; it is never re-sorted so
    ties on ``created_at`` stay as the backend broke them. Likes and comments
    pointing at posts outside ``posts`` do not produce rows.
    """

    likes_count: Counter[str] = Counter()
    viewer_liked: set[str] = set()
    for like in likes:
        post_id = like.get("post_id")
        likes_count[post_id] += 1
        if viewer_id is not None and like.get("user_id") == viewer_id:
            viewer_liked.add(post_id)

    comments_count: Counter[str] = Counter(comment.get("post_id") for comment in comments)

    records: list[ViewPost] = []
    for post in posts:
        post_id = post["id"]
        records.append(
            ViewPost.model_validate(
                {
                    **post,
                    "likes_count": likes_count.get(post_id, 0),
                    "comments_count": comments_count.get(post_id, 0),
                    "user_liked": post_id in viewer_liked,
                }
            )
        )
    return records


async def list_feed_records(client: AsyncClient, *, viewer_id: str | None) -> list[ViewPost]:
    """Return every post, newest first, with counters computed for ``viewer_id``."""

    posts = await execute_query(
        client.table(POSTS_TABLE).select("*").order("created_at", desc=True),
        action="load posts",
    )
    likes = await execute_query(
        client.table(LIKES_TABLE).select("post_id, user_id"),
        action="load likes",
    )
    comments = await execute_query(
        client.table(COMMENTS_TABLE).select("post_id"),
        action="load comments",
    )
    return aggregate_feed(posts, likes, comments, viewer_id)


async def list_user_post_records(
    client: AsyncClient,
    *,
    author_id: str,
    viewer_id: str | None = None,
) -> list[ViewPost]:
    """Return the posts written by ``author_id`` with counters scoped to those posts."""

    posts = await execute_query(
        client.table(POSTS_TABLE).select("*").eq("user_id", author_id).order("created_at", desc=True),
        action="load your posts",
    )
    if not posts:
        return []

    post_ids = [post["id"] for post in posts]
    likes = await execute_query(
        client.table(LIKES_TABLE).select("post_id, user_id").in_("post_id", post_ids),
        action="load likes",
    )
    comments = await execute_query(
        client.table(COMMENTS_TABLE).select("post_id").in_("post_id", post_ids),
        action="load comments",
    )
    return aggregate_feed(posts, likes, comments, author_id if viewer_id is None else viewer_id)


async def create_post_record(
    client: AsyncClient,
    *,
    author: UserProfile,
    content: str,
    image: ImageSource | None = None,
) -> None:
    """Validate and persist a new post for ``author``, uploading ``image`` first when given.

    A failed upload aborts the post; an upload followed by a failed insert
    leaves the stored object behind.
    """

    text = (content or "").strip()
    if not text and image is None:
        raise EmptyPostError()

    image_url: str | None = None
    if image is not None:
        image_url = await upload_post_image(client, owner_id=author.id, image=image)

    payload = PostCreate(
        user_id=author.id,
        user_name=author.display_name,
        user_email=author.email,
        content=text,
        image_url=image_url,
    )
    await execute_query(client.table(POSTS_TABLE).insert(payload.model_dump()), action="create post")
    logger.info("Created post for user %s (image=%s)", author.id, bool(image_url))


async def set_post_like_state(
    client: AsyncClient,
    *,
    post_id: str,
    user_id: str,
    should_like: bool,
) -> None:
    """Insert or delete the single like row for ``(post_id, user_id)``."""

    likes = client.table(LIKES_TABLE)
    if should_like:
        await execute_query(likes.insert({"post_id": post_id, "user_id": user_id}), action="like post")
    else:
        await execute_query(
            likes.delete().eq("post_id", post_id).eq("user_id", user_id),
            action="unlike post",
        )


async def list_post_comments(client: AsyncClient, *, post_id: str) -> list[CommentRow]:
    rows = await execute_query(
        client.table(COMMENTS_TABLE).select("*").eq("post_id", post_id).order("created_at", desc=True),
        action="load comments",
    )
    return [CommentRow.model_validate(row) for row in rows]


async def create_post_comment(
    client: AsyncClient,
    *,
    post_id: str,
    author: UserProfile,
    content: str,
) -> None:
    text = (content or "").strip()
    if not text:
        raise ValidationError("Comment cannot be empty", title="Empty Comment")

    payload = CommentCreate(
        post_id=post_id,
        user_id=author.id,
        user_name=author.display_name,
        content=text,
    )
    await execute_query(client.table(COMMENTS_TABLE).insert(payload.model_dump()), action="add comment")


__all__ = [
    "execute_query",
    "aggregate_feed",
    "list_feed_records",
    "list_user_post_records",
    "create_post_record",
    "set_post_like_state",
    "list_post_comments",
    "create_post_comment",
]
