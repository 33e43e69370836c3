"""Tests for the session store and the auth bridge that keeps it current."""
from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest

from framez.errors import BackendRequestError
from framez.services import SessionStore, bootstrap_session


def _session(user_id):
    return SimpleNamespace(user=SimpleNamespace(id=user_id))


async def _settle():
    for _ in range(5):
        await asyncio.sleep(0)


def test_new_store_is_loading_and_signed_out():
    store = SessionStore()

    assert store.loading is True
    assert store.user is None
    assert store.is_authenticated is False


def test_set_user_clears_loading_and_notifies(viewer):
    store = SessionStore()
    seen = []
    store.subscribe(lambda s: seen.append(s.user))

    store.set_user(viewer)

    assert store.loading is False
    assert store.is_authenticated is True
    assert seen == [viewer]


def test_unsubscribe_stops_notifications(viewer):
    store = SessionStore()
    seen = []
    unsubscribe = store.subscribe(lambda s: seen.append(s.user))

    unsubscribe()
    unsubscribe()
    store.set_user(viewer)

    assert seen == []


def test_logout_signs_out_then_clears_user(backend, session_store):
    seen = []
    session_store.subscribe(lambda s: seen.append(s.user))

    asyncio.run(session_store.logout())

    assert backend.auth.sign_out_calls == 1
    assert session_store.user is None
    assert seen == [None]


def test_failed_logout_keeps_user(backend, session_store, viewer):
    backend.failures[("auth", "sign_out")] = "offline"

    with pytest.raises(BackendRequestError):
        asyncio.run(session_store.logout())

    assert session_store.user == viewer


def test_logout_without_client_is_an_error(viewer):
    store = SessionStore()
    store.set_user(viewer)

    with pytest.raises(RuntimeError):
        asyncio.run(store.logout())


def test_bootstrap_resolves_stored_session_profile(backend):
    backend.auth.session = _session("u1")
    store = SessionStore()

    async def scenario():
        bridge = await bootstrap_session(store, backend)
        await bridge.close()

    asyncio.run(scenario())

    assert store.loading is False
    assert store.user.display_name == "Ada"
    assert backend.auth.subscriptions == []


def test_bootstrap_without_session_finishes_loading_signed_out(backend):
    store = SessionStore()

    async def scenario():
        bridge = await bootstrap_session(store, backend)
        await bridge.close()

    asyncio.run(scenario())

    assert store.loading is False
    assert store.user is None


def test_bootstrap_treats_unreadable_session_as_signed_out(backend):
    backend.failures[("auth", "get_session")] = "corrupt storage"
    store = SessionStore()

    async def scenario():
        bridge = await bootstrap_session(store, backend)
        await bridge.close()

    asyncio.run(scenario())

    assert store.loading is False
    assert store.user is None


def test_bridge_follows_sign_in_and_sign_out(backend):
    store = SessionStore()
    users = []

    async def scenario():
        bridge = await bootstrap_session(store, backend)
        store.subscribe(lambda s: users.append(s.user.id if s.user else None))
        backend.auth.emit("SIGNED_IN", _session("u2"))
        await _settle()
        backend.auth.emit("SIGNED_OUT", None)
        await _settle()
        await bridge.close()

    asyncio.run(scenario())

    assert users == ["u2", None]


def test_older_auth_event_does_not_overwrite_newer(backend):
    store = SessionStore()

    async def scenario():
        bridge = await bootstrap_session(store, backend)
        backend.auth.emit("SIGNED_IN", _session("u2"))
        backend.auth.emit("SIGNED_OUT", None)
        await _settle()
        await bridge.close()

    asyncio.run(scenario())

    assert store.user is None


def test_closed_bridge_ignores_auth_events(backend):
    store = SessionStore()

    async def scenario():
        bridge = await bootstrap_session(store, backend)
        await bridge.close()
        backend.auth.emit("SIGNED_IN", _session("u2"))
        await _settle()

    asyncio.run(scenario())

    assert store.user is None
