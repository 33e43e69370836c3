"""Expose reusable UI components."""
from __future__ import annotations

from . import feedback, post_card

__all__ = [
    "feedback",
    "post_card",
]
