"""Project-wide constant values."""
from __future__ import annotations

POSTS_TABLE = "posts"
LIKES_TABLE = "likes"
COMMENTS_TABLE = "comments"
USERS_TABLE = "users"

POST_IMAGE_CONTENT_TYPE = "image/jpeg"

MIN_PASSWORD_LENGTH = 6

__all__ = [
    "POSTS_TABLE",
    "LIKES_TABLE",
    "COMMENTS_TABLE",
    "USERS_TABLE",
    "POST_IMAGE_CONTENT_TYPE",
    "MIN_PASSWORD_LENGTH",
]
