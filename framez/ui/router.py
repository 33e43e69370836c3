"""Screen routes and the entry gate that picks the first one."""
from __future__ import annotations

from enum import Enum
from typing import Callable

from ..services.session_store import SessionStore


class Route(str, Enum):
    SPLASH = "/"
    LOGIN = "/(auth)/login"
    REGISTER = "/(auth)/register"
    FEED = "/(tabs)/feed"
    CREATE = "/(tabs)/create"
    PROFILE = "/(tabs)/profile"


Navigator = Callable[[Route], None]


def resolve_initial_route(store: SessionStore) -> Route:
    """Keep the splash up while auth is undetermined, then send the viewer to the feed or login."""

    if store.loading:
        return Route.SPLASH
    return Route.FEED if store.user is not None else Route.LOGIN


class RouteGate:
    """Waits on the session store and navigates once, as soon as auth state is known."""

    def __init__(self, store: SessionStore, navigate: Navigator) -> None:
        self._store = store
        self._navigate = navigate
        self._current: Route | None = None
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def current(self) -> Route | None:
        return self._current

    def start(self) -> None:
        self._unsubscribe = self._store.subscribe(lambda _store: self._evaluate())
        self._evaluate()

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _evaluate(self) -> None:
        route = resolve_initial_route(self._store)
        if route is Route.SPLASH or self._current is not None:
            return
        self._current = route
        self.stop()
        self._navigate(route)


__all__ = ["Route", "Navigator", "resolve_initial_route", "RouteGate"]
