"""Realtime change subscriptions and in-place patching of displayed feeds."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence

from supabase import AsyncClient

from ..config import get_settings
from ..constants import COMMENTS_TABLE, LIKES_TABLE
from ..errors import BackendRequestError, describe_error
from ..schemas import ViewPost

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableWatch:
    """One relation a channel listens to, optionally narrowed by a ``column=eq.value`` filter."""

    table: str
    filter: str | None = None


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    event_type: str
    record: dict[str, Any] = field(default_factory=dict)
    old_record: dict[str, Any] = field(default_factory=dict)


ChangeHandler = Callable[[ChangeEvent], None]


def _as_dict(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def parse_change_event(payload: Mapping[str, Any], *, default_table: str = "") -> ChangeEvent:
    """Normalise a postgres change payload from either the nested or the flat wire layout."""

    data = payload.get("data") if isinstance(payload.get("data"), Mapping) else payload
    event_type = data.get("type") or data.get("eventType") or data.get("event_type") or ""
    record = data.get("record", data.get("new"))
    old_record = data.get("old_record", data.get("old"))
    return ChangeEvent(
        table=str(data.get("table") or default_table),
        event_type=str(event_type).upper(),
        record=_as_dict(record),
        old_record=_as_dict(old_record),
    )


def apply_change(
    posts: Sequence[ViewPost],
    event: ChangeEvent,
    viewer_id: str | None,
) -> list[ViewPost] | None:
    """Patch the counters of the post ``event`` touches.

    Returns the patched list, the unchanged list when the event concerns a post
    that is not displayed, or ``None`` when only a full re-fetch can account for
    the change (post edits, or rows whose payload lacks ``post_id``).
    """

    if event.table == LIKES_TABLE and event.event_type in {"INSERT", "DELETE"}:
        row = event.record if event.event_type == "INSERT" else event.old_record
        delta = 1 if event.event_type == "INSERT" else -1
    elif event.table == COMMENTS_TABLE and event.event_type == "INSERT":
        row = event.record
        delta = 1
    else:
        return None

    post_id = row.get("post_id")
    if not post_id:
        return None

    patched: list[ViewPost] = []
    for post in posts:
        if post.id != post_id:
            patched.append(post)
            continue
        if event.table == LIKES_TABLE:
            update: dict[str, Any] = {"likes_count": max(post.likes_count + delta, 0)}
            if viewer_id is not None and row.get("user_id") == viewer_id:
                update["user_liked"] = delta > 0
        else:
            update = {"comments_count": post.comments_count + delta}
        patched.append(post.model_copy(update=update))
    return patched


class RealtimeSubscription:
    """Owns one realtime channel that forwards every change on ``watches`` to ``handler``."""

    def __init__(
        self,
        client: AsyncClient,
        name: str,
        watches: Sequence[TableWatch],
        handler: ChangeHandler,
        *,
        schema: str | None = None,
    ) -> None:
        self._client = client
        self._name = name
        self._watches = list(watches)
        self._handler = handler
        self._schema = schema or get_settings().realtime_schema
        self._channel: Any = None

    @property
    def active(self) -> bool:
        return self._channel is not None

    def _callback_for(self, table: str) -> Callable[[Mapping[str, Any]], None]:
        def _callback(payload: Mapping[str, Any]) -> None:
            event = parse_change_event(payload, default_table=table)
            logger.debug("Channel %s received %s on %s", self._name, event.event_type, event.table)
            self._handler(event)

        return _callback

    async def start(self) -> None:
        if self._channel is not None:
            return
        channel = self._client.channel(self._name)
        for watch in self._watches:
            channel = channel.on_postgres_changes(
                "*",
                callback=self._callback_for(watch.table),
                table=watch.table,
                schema=self._schema,
                filter=watch.filter,
            )
        try:
            await channel.subscribe()
        except Exception as exc:
            logger.exception("Subscribing channel %s failed", self._name)
            raise BackendRequestError("subscribe to live updates", describe_error(exc)) from exc
        self._channel = channel
        logger.info("Subscribed channel %s to %s", self._name, ", ".join(w.table for w in self._watches))

    async def stop(self) -> None:
        if self._channel is None:
            return
        channel, self._channel = self._channel, None
        try:
            await self._client.remove_channel(channel)
        except Exception:  # pragma: no cover - best effort teardown
            logger.exception("Removing channel %s failed", self._name)


__all__ = [
    "TableWatch",
    "ChangeEvent",
    "ChangeHandler",
    "parse_change_event",
    "apply_change",
    "RealtimeSubscription",
]
