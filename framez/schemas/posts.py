"""Pydantic schemas for post, like and comment rows served by the backend."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PostRow(BaseModel):
    """A row of the ``posts`` relation with its denormalized author snapshot."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str = ""
    user_name: str = ""
    user_email: str = ""
    content: str = ""
    image_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ViewPost(PostRow):
    """Post row enriched with counters derived from the likes and comments relations."""

    likes_count: int = 0
    comments_count: int = 0
    user_liked: bool = False


class CommentRow(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    post_id: str
    user_id: str = ""
    user_name: str = ""
    content: str
    created_at: datetime | None = None


class PostCreate(BaseModel):
    """Payload inserted into ``posts`` when the composer submits."""

    user_id: str
    user_name: str
    user_email: str
    content: str = ""
    image_url: str | None = None


class CommentCreate(BaseModel):
    post_id: str
    user_id: str
    user_name: str
    content: str = Field(..., min_length=1)


__all__ = [
    "PostRow",
    "ViewPost",
    "CommentRow",
    "PostCreate",
    "CommentCreate",
]
