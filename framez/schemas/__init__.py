"""Pydantic schemas shared across services and screens."""
from .auth import LoginRequest, RegisterRequest, UserProfile
from .posts import CommentCreate, CommentRow, PostCreate, PostRow, ViewPost

__all__ = [
    "LoginRequest",
    "RegisterRequest",
    "UserProfile",
    "CommentCreate",
    "CommentRow",
    "PostCreate",
    "PostRow",
    "ViewPost",
]
