"""Utilities for loading sensitive configuration without leaking values."""
from __future__ import annotations

from typing import Final

__all__ = ["MissingSecretError", "ensure_secret", "is_placeholder"]


class MissingSecretError(RuntimeError):
    """Raised when a required secret is not set or still holds a placeholder."""


_PLACEHOLDER_VALUES: Final[set[str]] = {
    "changeme",
    "change-me",
    "placeholder",
    "example",
    "sample",
    "your-anon-key",
    "your-key-here",
}


def is_placeholder(value: str | None) -> bool:
    if not value:
        return True
    normalized = value.strip().lower()
    return not normalized or normalized in _PLACEHOLDER_VALUES


def ensure_secret(name: str, value: str | None) -> str:
    """Return ``value`` trimmed, or raise :class:`MissingSecretError` for blanks and placeholders."""

    if is_placeholder(value):
        raise MissingSecretError(f"{name} is required and must not use placeholder defaults")
    return value.strip()

