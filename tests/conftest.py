"""Shared fixtures: an in-memory stand-in for the Supabase async client."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any, Callable

import pytest

# Settings are resolved lazily, but the required values must exist before any service reads them.
os.environ.setdefault("SUPABASE_URL", "https://framez-test.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")

from framez.config import get_settings  # noqa: E402
from framez.schemas import UserProfile  # noqa: E402


class FakeBackendError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass
class FakeResponse:
    data: Any


class FakeQuery:
    def __init__(self, backend: "FakeSupabase", table: str) -> None:
        self._backend = backend
        self._table = table
        self._op = "select"
        self._columns = "*"
        self._payload: Any = None
        self._filters: list[tuple[str, str, Any]] = []
        self._order: tuple[str, bool] | None = None
        self._limit: int | None = None

    def select(self, columns: str = "*") -> "FakeQuery":
        self._op = "select"
        self._columns = columns
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self._op = "insert"
        self._payload = payload
        return self

    def delete(self) -> "FakeQuery":
        self._op = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append(("eq", column, value))
        return self

    def in_(self, column: str, values: list[Any]) -> "FakeQuery":
        self._filters.append(("in", column, list(values)))
        return self

    def order(self, column: str, *, desc: bool = False) -> "FakeQuery":
        self._order = (column, desc)
        return self

    def limit(self, count: int) -> "FakeQuery":
        self._limit = count
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        for kind, column, value in self._filters:
            if kind == "eq" and row.get(column) != value:
                return False
            if kind == "in" and row.get(column) not in value:
                return False
        return True

    async def execute(self) -> FakeResponse:
        self._backend.calls.append((self._table, self._op, tuple((k, c) for k, c, _ in self._filters)))
        await self._backend.before_execute(self._table, self._op)
        failure = self._backend.failures.get((self._table, self._op))
        if failure is not None:
            raise FakeBackendError(failure)

        rows = self._backend.tables.setdefault(self._table, [])
        if self._op == "insert":
            record = self._backend.new_row(self._table, self._payload)
            rows.append(record)
            return FakeResponse([record])
        if self._op == "delete":
            removed = [row for row in rows if self._matches(row)]
            self._backend.tables[self._table] = [row for row in rows if not self._matches(row)]
            return FakeResponse(removed)

        selected = [row for row in rows if self._matches(row)]
        if self._order is not None:
            column, desc = self._order
            selected = sorted(selected, key=lambda row: row.get(column) or "", reverse=desc)
        if self._limit is not None:
            selected = selected[: self._limit]
        if self._columns.strip() != "*":
            wanted = [name.strip() for name in self._columns.split(",")]
            selected = [{name: row.get(name) for name in wanted} for row in selected]
        return FakeResponse([dict(row) for row in selected])


class FakeBucket:
    def __init__(self, backend: "FakeSupabase", name: str) -> None:
        self._backend = backend
        self._name = name

    async def upload(self, path: str, file: bytes, file_options: dict[str, str] | None = None) -> Any:
        self._backend.calls.append(("storage:" + self._name, "upload", (path,)))
        if self._backend.failures.get(("storage", "upload")):
            raise FakeBackendError(self._backend.failures[("storage", "upload")])
        self._backend.uploads.append((self._name, path, file, dict(file_options or {})))
        return SimpleNamespace(path=path)

    def get_public_url(self, path: str) -> str:
        return f"https://cdn.framez.test/{self._name}/{path}"


class FakeStorage:
    def __init__(self, backend: "FakeSupabase") -> None:
        self._backend = backend

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self._backend, bucket)


class FakeSubscription:
    def __init__(self, auth: "FakeAuth", callback: Callable[[str, Any], None]) -> None:
        self._auth = auth
        self.callback = callback

    def unsubscribe(self) -> None:
        if self in self._auth.subscriptions:
            self._auth.subscriptions.remove(self)


class FakeAuth:
    def __init__(self, backend: "FakeSupabase") -> None:
        self._backend = backend
        self.session: Any = None
        self.subscriptions: list[FakeSubscription] = []
        self.sign_in_calls: list[dict[str, Any]] = []
        self.sign_up_calls: list[dict[str, Any]] = []
        self.sign_out_calls = 0

    def _maybe_fail(self, op: str) -> None:
        failure = self._backend.failures.get(("auth", op))
        if failure is not None:
            raise FakeBackendError(failure)

    async def sign_in_with_password(self, credentials: dict[str, Any]) -> Any:
        self.sign_in_calls.append(credentials)
        self._maybe_fail("sign_in")
        return SimpleNamespace(user=SimpleNamespace(id="u1"), session=SimpleNamespace(user=SimpleNamespace(id="u1")))

    async def sign_up(self, credentials: dict[str, Any]) -> Any:
        self.sign_up_calls.append(credentials)
        self._maybe_fail("sign_up")
        return SimpleNamespace(user=SimpleNamespace(id="u-new"), session=None)

    async def sign_out(self) -> None:
        self.sign_out_calls += 1
        self._maybe_fail("sign_out")
        self.session = None

    async def get_session(self) -> Any:
        self._maybe_fail("get_session")
        return self.session

    def on_auth_state_change(self, callback: Callable[[str, Any], None]) -> FakeSubscription:
        subscription = FakeSubscription(self, callback)
        self.subscriptions.append(subscription)
        return subscription

    def emit(self, event: str, session: Any) -> None:
        self.session = session
        for subscription in list(self.subscriptions):
            subscription.callback(event, session)


class FakeChannel:
    def __init__(self, backend: "FakeSupabase", name: str) -> None:
        self._backend = backend
        self.name = name
        self.bindings: list[dict[str, Any]] = []
        self.subscribed = False

    def on_postgres_changes(
        self,
        event: str,
        callback: Callable[[dict[str, Any]], None],
        table: str = "*",
        schema: str = "public",
        filter: str | None = None,
    ) -> "FakeChannel":
        self.bindings.append(
            {"event": event, "callback": callback, "table": table, "schema": schema, "filter": filter}
        )
        return self

    async def subscribe(self) -> "FakeChannel":
        if self._backend.failures.get(("realtime", "subscribe")):
            raise FakeBackendError(self._backend.failures[("realtime", "subscribe")])
        self.subscribed = True
        return self


@dataclass
class FakeSupabase:
    """Mimics the slice of ``supabase.AsyncClient`` the client code relies on."""

    tables: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    failures: dict[tuple[str, str], str] = field(default_factory=dict)
    calls: list[tuple[str, str, tuple]] = field(default_factory=list)
    uploads: list[tuple[str, str, bytes, dict[str, str]]] = field(default_factory=list)
    channels: list[FakeChannel] = field(default_factory=list)
    removed_channels: list[FakeChannel] = field(default_factory=list)
    hooks: dict[tuple[str, str], Callable[[], Any]] = field(default_factory=dict)
    _counter: int = 0

    def __post_init__(self) -> None:
        self.auth = FakeAuth(self)
        self.storage = FakeStorage(self)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def channel(self, name: str) -> FakeChannel:
        channel = FakeChannel(self, name)
        self.channels.append(channel)
        return channel

    async def remove_channel(self, channel: FakeChannel) -> None:
        channel.subscribed = False
        self.removed_channels.append(channel)

    async def remove_all_channels(self) -> None:
        for channel in self.channels:
            await self.remove_channel(channel)

    async def before_execute(self, table: str, op: str) -> None:
        hook = self.hooks.pop((table, op), None)
        if hook is not None:
            await hook()

    def new_row(self, table: str, payload: dict[str, Any]) -> dict[str, Any]:
        self._counter += 1
        return {
            "id": f"{table}-{self._counter}",
            "created_at": f"2026-10-19T12:{self._counter:02d}:00+00:00",
            **payload,
        }

    def emit(self, table: str, event_type: str, record: dict[str, Any] | None = None, old: dict[str, Any] | None = None) -> None:
        payload = {
            "data": {
                "table": table,
                "type": event_type,
                "record": record or {},
                "old_record": old or {},
            },
            "ids": [],
        }
        for channel in self.channels:
            if not channel.subscribed:
                continue
            for binding in channel.bindings:
                if binding["table"] == table:
                    binding["callback"](payload)

    def count_calls(self, table: str, op: str = "select") -> int:
        return sum(1 for call_table, call_op, _ in self.calls if call_table == table and call_op == op)


def make_post(post_id: str, created_at: str, *, user_id: str = "u1", content: str = "hello") -> dict[str, Any]:
    return {
        "id": post_id,
        "user_id": user_id,
        "user_name": "Ada" if user_id == "u1" else "Grace",
        "user_email": f"{user_id}@framez.app",
        "content": content,
        "image_url": None,
        "created_at": created_at,
        "updated_at": created_at,
    }


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def backend() -> FakeSupabase:
    return FakeSupabase(
        tables={
            "users": [
                {
                    "id": "u1",
                    "email": "ada@framez.app",
                    "display_name": "Ada",
                    "avatar_url": None,
                    "created_at": "2026-01-01T00:00:00+00:00",
                },
                {
                    "id": "u2",
                    "email": "grace@framez.app",
                    "display_name": "Grace",
                    "avatar_url": None,
                    "created_at": "2026-01-02T00:00:00+00:00",
                },
            ],
            "posts": [
                make_post("p1", "2026-10-19T10:00:00+00:00"),
                make_post("p2", "2026-10-18T10:00:00+00:00", user_id="u2", content="second"),
            ],
            "likes": [
                {"id": "l1", "post_id": "p1", "user_id": "u1"},
                {"id": "l2", "post_id": "p1", "user_id": "u2"},
            ],
            "comments": [
                {
                    "id": "c1",
                    "post_id": "p1",
                    "user_id": "u2",
                    "user_name": "Grace",
                    "content": "nice",
                    "created_at": "2026-10-19T11:00:00+00:00",
                },
            ],
        }
    )


@pytest.fixture
def viewer() -> UserProfile:
    return UserProfile(id="u1", email="ada@framez.app", display_name="Ada")


@pytest.fixture
def session_store(backend, viewer):
    from framez.services import SessionStore

    store = SessionStore(backend)
    store.set_user(viewer)
    return store
