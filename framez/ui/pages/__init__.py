"""Export screen view models for composition."""
from __future__ import annotations

from .auth import LoginScreen, RegisterScreen
from .create import CreatePostScreen
from .feed import FeedScreen
from .post_list import PostListScreen
from .profile import ProfileScreen

__all__ = [
    "LoginScreen",
    "RegisterScreen",
    "CreatePostScreen",
    "FeedScreen",
    "PostListScreen",
    "ProfileScreen",
]
