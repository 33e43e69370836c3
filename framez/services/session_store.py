"""Process-wide record of who is signed in, plus the bridge that keeps it in sync with auth events."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from supabase import AsyncClient

from ..errors import BackendRequestError
from ..schemas import UserProfile
from .auth_service import fetch_profile, get_current_session, sign_out

logger = logging.getLogger(__name__)

SessionListener = Callable[["SessionStore"], None]


class SessionStore:
    """Holds the current viewer and the initial-load gate.

    ``loading`` is true until the first auth check resolves; afterwards a
    ``None`` user means the viewer is definitely signed out.
    """

    def __init__(self, client: AsyncClient | None = None) -> None:
        self._client = client
        self._user: UserProfile | None = None
        self._loading = True
        self._listeners: list[SessionListener] = []

    @property
    def user(self) -> UserProfile | None:
        return self._user

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def attach_client(self, client: AsyncClient) -> None:
        self._client = client

    def set_user(self, user: UserProfile | None) -> None:
        self._user = user
        self._loading = False
        self._notify()

    def set_loading(self, loading: bool) -> None:
        self._loading = loading
        self._notify()

    async def logout(self) -> None:
        """Sign out on the backend, then forget the viewer. Navigation is left to the caller."""

        if self._client is None:
            raise RuntimeError("SessionStore has no backend client attached")
        try:
            await sign_out(self._client)
        except BackendRequestError:
            logger.error("Logout failed; keeping the current session")
            raise
        self._user = None
        self._notify()

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register ``listener`` for every change and return a callable that removes it."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)


def _session_user_id(session: Any) -> str | None:
    user = getattr(session, "user", None)
    if user is None and isinstance(session, dict):
        user = session.get("user")
    if user is None:
        return None
    user_id = getattr(user, "id", None)
    if user_id is None and isinstance(user, dict):
        user_id = user.get("id")
    return str(user_id) if user_id else None


class AuthSessionBridge:
    """Bootstraps a :class:`SessionStore` from the stored session and follows auth changes."""

    def __init__(self, store: SessionStore, client: AsyncClient) -> None:
        self._store = store
        self._client = client
        self._subscription: Any = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._pending: set[asyncio.Task[None]] = set()
        self._sequence = 0

    async def start(self) -> None:
        """Resolve the existing session once, then listen for later sign-in/sign-out events."""

        self._store.attach_client(self._client)
        self._loop = asyncio.get_running_loop()
        self._sequence += 1
        sequence = self._sequence
        try:
            session = await get_current_session(self._client)
            user_id = _session_user_id(session)
            profile = await fetch_profile(self._client, user_id) if user_id else None
        except BackendRequestError:
            logger.error("Initial session check failed; treating viewer as signed out")
            profile = None

        if sequence == self._sequence:
            if profile is not None:
                self._store.set_user(profile)
            else:
                self._store.set_loading(False)

        self._subscription = self._client.auth.on_auth_state_change(self._on_auth_state_change)

    def _on_auth_state_change(self, event: Any, session: Any) -> None:
        if self._loop is None:
            return
        self._sequence += 1
        task = self._loop.create_task(self._resolve(session, self._sequence))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _resolve(self, session: Any, sequence: int) -> None:
        user_id = _session_user_id(session)
        if user_id is None:
            if sequence == self._sequence:
                self._store.set_user(None)
            return

        try:
            profile = await fetch_profile(self._client, user_id)
        except BackendRequestError:
            logger.error("Could not resolve profile for user %s after auth change", user_id)
            return

        # An older event finishing late must not overwrite a newer one.
        if profile is not None and sequence == self._sequence:
            self._store.set_user(profile)

    async def close(self) -> None:
        """Release the auth listener and wait out in-flight profile lookups."""

        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._loop = None


async def bootstrap_session(store: SessionStore, client: AsyncClient) -> AuthSessionBridge:
    """Start an :class:`AuthSessionBridge` for ``store``; call ``close()`` on it at teardown."""

    bridge = AuthSessionBridge(store, client)
    await bridge.start()
    return bridge


__all__ = ["SessionStore", "SessionListener", "AuthSessionBridge", "bootstrap_session"]
