"""Shared view model for screens that show a live, aggregated list of posts."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

from supabase import AsyncClient

from ...errors import BackendRequestError
from ...schemas import ViewPost
from ...services.realtime import ChangeEvent, RealtimeSubscription, TableWatch, apply_change
from ...services.session_store import SessionStore
from ..components.feedback import Notifier, alert_for_error
from ..components.post_card import PostCard

logger = logging.getLogger(__name__)

ScreenListener = Callable[["PostListScreen"], None]


class PostListScreen:
    """Fetch, aggregate and live-sync a list of posts while the screen is active.

    Every fetch takes a sequence number; a response that settles after a newer
    one has been applied is dropped. A change notification patches counters in
    place when the payload names the affected post, then always schedules a
    full re-fetch whose result replaces the patch. A viewer change rebuilds the
    channel when the watched tables or filters depend on the viewer.
    """

    channel_name = "posts_changes"
    load_error_title = "Couldn't load posts"

    def __init__(self, client: AsyncClient, session: SessionStore, notify: Notifier) -> None:
        self._client = client
        self._session = session
        self._notify = notify

        self.posts: list[ViewPost] = []
        self.loading = True
        self.refreshing = False

        self._cards: dict[str, PostCard] = {}
        self._listeners: list[ScreenListener] = []
        self._requested = 0
        self._applied = 0
        self._subscription: RealtimeSubscription | None = None
        self._watches: list[TableWatch] = []
        self._pending: set[asyncio.Task[None]] = set()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._unsubscribe_session: Callable[[], None] | None = None
        self._viewer_id: str | None = None

    # -- hooks for concrete screens -------------------------------------------------

    async def load_posts(self) -> list[ViewPost]:
        raise NotImplementedError

    def table_watches(self) -> list[TableWatch]:
        raise NotImplementedError

    def can_load(self) -> bool:
        return True

    # -- state ----------------------------------------------------------------------

    @property
    def viewer_id(self) -> str | None:
        user = self._session.user
        return user.id if user is not None else None

    @property
    def active(self) -> bool:
        return self._loop is not None

    @property
    def is_empty(self) -> bool:
        return not self.loading and not self.posts

    def add_listener(self, listener: ScreenListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def card_for(self, post_id: str) -> PostCard:
        """Return the interaction model for a displayed post, creating it on first access."""

        card = self._cards.get(post_id)
        if card is None:
            post = next((p for p in self.posts if p.id == post_id), None)
            if post is None:
                raise KeyError(post_id)
            card = PostCard(
                post,
                client=self._client,
                session=self._session,
                notify=self._notify,
                on_update=self.fetch,
            )
            self._cards[post_id] = card
        return card

    def _apply_posts(self, posts: list[ViewPost]) -> None:
        self.posts = posts
        by_id = {post.id: post for post in posts}
        for post_id in list(self._cards):
            post = by_id.get(post_id)
            if post is None:
                del self._cards[post_id]
            else:
                self._cards[post_id].sync(post)
        self._changed()

    # -- fetching -------------------------------------------------------------------

    async def fetch(self) -> None:
        """Re-fetch and re-aggregate; the newest issued request wins."""

        if not self.can_load():
            self.loading = False
            self.refreshing = False
            self._changed()
            return

        self._requested += 1
        sequence = self._requested
        try:
            posts = await self.load_posts()
        except BackendRequestError as exc:
            if sequence == self._requested:
                self._notify(alert_for_error(exc, title=self.load_error_title))
        else:
            if sequence > self._applied:
                self._applied = sequence
                self._apply_posts(posts)
            else:
                logger.debug("Dropping stale %s response #%d (applied #%d)", self.channel_name, sequence, self._applied)
        finally:
            if sequence == self._requested:
                self.loading = False
                self.refreshing = False
                self._changed()

    async def refresh(self) -> None:
        self.refreshing = True
        self._changed()
        await self.fetch()

    def _schedule(self, coro: Coroutine[Any, Any, None]) -> None:
        if self._loop is None:
            coro.close()
            return
        task = self._loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _schedule_fetch(self) -> None:
        self._schedule(self.fetch())

    def _on_change(self, event: ChangeEvent) -> None:
        # The patch is provisional: the fetch may already have counted this row.
        patched = apply_change(self.posts, event, self.viewer_id)
        if patched is not None and patched != self.posts:
            self._apply_posts(patched)
        self._schedule_fetch()

    def _on_session_change(self, store: SessionStore) -> None:
        viewer_id = self.viewer_id
        if viewer_id == self._viewer_id:
            return
        self._viewer_id = viewer_id
        if self._desired_watches() != self._watches:
            self._schedule(self._resubscribe())
        else:
            self._schedule_fetch()

    def _desired_watches(self) -> list[TableWatch]:
        return self.table_watches() if self.can_load() else []

    async def _subscribe(self) -> None:
        self._watches = self._desired_watches()
        if not self._watches:
            return
        subscription = RealtimeSubscription(self._client, self.channel_name, self._watches, self._on_change)
        self._subscription = subscription
        try:
            await subscription.start()
        except BackendRequestError as exc:
            self._subscription = None
            self._notify(alert_for_error(exc, title="Live updates unavailable"))

    async def _unsubscribe(self) -> None:
        subscription, self._subscription = self._subscription, None
        self._watches = []
        if subscription is not None:
            await subscription.stop()

    async def _resubscribe(self) -> None:
        await self._unsubscribe()
        await self._subscribe()
        await self.fetch()

    # -- lifecycle ------------------------------------------------------------------

    async def activate(self) -> None:
        """Start listening for changes and load the list; pair with :meth:`deactivate`."""

        if self._loop is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._viewer_id = self.viewer_id
        self._unsubscribe_session = self._session.subscribe(self._on_session_change)
        self.loading = True

        await self._subscribe()
        await self.fetch()

    async def deactivate(self) -> None:
        """Release the channel and drop fetches still in flight."""

        if self._loop is None:
            return
        self._loop = None
        if self._unsubscribe_session is not None:
            self._unsubscribe_session()
            self._unsubscribe_session = None
        await self._unsubscribe()
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


__all__ = ["PostListScreen", "ScreenListener"]
