"""Display helpers shared by screens and the terminal harness."""
from __future__ import annotations

from datetime import datetime, timezone


def format_timestamp(value: datetime | None, *, now: datetime | None = None) -> str:
    """Render ``value`` relative to ``now``: seconds, minutes, hours and days ago, then a date."""

    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    reference = now or datetime.now(timezone.utc)
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)

    seconds = int((reference - value).total_seconds())
    if seconds < 60:
        return "Just now"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    days = hours // 24
    if days < 7:
        return f"{days}d ago"
    return f"{value:%b} {value.day}, {value.year}"


def avatar_initial(name: str | None) -> str:
    text = (name or "").strip()
    return text[:1].upper() if text else "?"


__all__ = ["format_timestamp", "avatar_initial"]
