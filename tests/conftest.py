"""Shared fixtures: an in-memory chat store served over httpx.MockTransport, and a scripted gateway."""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx
import pytest

from chat_sessions.bus import InvalidationBus
from chat_sessions.errors import ChatSessionsError, UnexpectedStatus
from chat_sessions.gateway import RemoteSessionGateway
from chat_sessions.models.session import SessionRecord
from chat_sessions.transport.http import HttpClient

NOW = datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc)
API_URL = "http://store.test/api"


def make_session(session_id: str, created_at: datetime = NOW, **fields: Any) -> SessionRecord:
    return SessionRecord(id=session_id, title=fields.pop("title", f"chat {session_id}"), created_at=created_at, **fields)


class FakeStore:
    """Just enough of the /chats API to exercise the gateway end to end."""

    def __init__(self) -> None:
        self.chats: dict[str, dict[str, Any]] = {}
        self.requests: list[tuple[str, str]] = []
        # (method, path) -> status to answer with instead of handling
        self.failures: dict[tuple[str, str], int] = {}

    def add(self, session_id: str, token: str = "tok1", age: timedelta = timedelta(0), **fields: Any) -> None:
        self.chats[session_id] = {
            "id": session_id,
            "title": fields.get("title", f"chat {session_id}"),
            "createdAt": (NOW - age).isoformat(),
            "focusMode": fields.get("focusMode", "webSearch"),
            "token": token,
            "archived": fields.get("archived", 0),
            "shared": fields.get("shared", 0),
        }

    def _owned(self, token: str, archived: bool) -> list[dict[str, Any]]:
        return [c for c in self.chats.values() if c["token"] == token and bool(c["archived"]) == archived]

    def handle(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        path = request.url.path.removeprefix("/api/chats")
        self.requests.append((method, path))
        if (method, path) in self.failures:
            return httpx.Response(self.failures[(method, path)], json={"message": "nope"})
        body = json.loads(request.content) if request.content else {}
        parts = [p for p in path.split("/") if p]

        if method == "GET" and len(parts) == 1:
            return httpx.Response(200, json={"chats": self._owned(parts[0], archived=False)})
        if method == "GET" and len(parts) == 2 and parts[1] == "archived":
            return httpx.Response(200, json={"chats": self._owned(parts[0], archived=True)})
        if method == "GET" and parts[0] == "export":
            dump = json.dumps({"chats": [c for c in self.chats.values() if c["token"] == parts[1]]})
            return httpx.Response(200, content=dump.encode(), headers={"Content-Type": "application/octet-stream"})
        if method == "DELETE" and parts[0] == "deleteAll":
            self.chats = {k: c for k, c in self.chats.items() if c["token"] != parts[1]}
            return httpx.Response(200, json={"message": "deleted"})
        if method == "DELETE" and len(parts) == 1:
            if self.chats.pop(parts[0], None) is None:
                return httpx.Response(404, json={"message": "not found"})
            return httpx.Response(200, json={"message": "deleted"})
        if method == "PATCH" and len(parts) == 2 and parts[0] in self.chats:
            chat = self.chats[parts[0]]
            if parts[1] == "archive":
                chat["archived"] = body["archived"]
                return httpx.Response(200, json={"message": "ok"})
            if parts[1] == "rename":
                chat["title"] = body["title"]
                return httpx.Response(200, json={"message": "ok"})
            if parts[1] == "share":
                chat["shared"] = body["shared"]
                url = f"https://chat.test/share/{parts[0]}" if body["shared"] else None
                return httpx.Response(200, json={"shareUrl": url})
        return httpx.Response(404, json={"message": "not found"})


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def http(store: FakeStore) -> HttpClient:
    return HttpClient(base_url=API_URL, transport=httpx.MockTransport(store.handle))


@pytest.fixture
def gateway(http: HttpClient) -> RemoteSessionGateway:
    return RemoteSessionGateway(http)


class ScriptedGateway:
    """Gateway double: serves canned lists, counts calls, can hold list_active open."""

    def __init__(self, active: Optional[list[SessionRecord]] = None, archived: Optional[list[SessionRecord]] = None):
        self.active = list(active or [])
        self.archived = list(archived or [])
        self.calls: list[tuple[str, Any]] = []
        self.fail: dict[str, ChatSessionsError] = {}
        self.fail_ids: dict[str, ChatSessionsError] = {}
        self.gate: Optional[asyncio.Event] = None

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail:
            raise self.fail[name]

    async def list_active(self, owner_token: str) -> list[SessionRecord]:
        self.calls.append(("list_active", owner_token))
        if self.gate is not None:
            await self.gate.wait()
        self._maybe_fail("list_active")
        return list(self.active)

    async def list_archived(self, owner_token: str) -> list[SessionRecord]:
        self.calls.append(("list_archived", owner_token))
        if self.gate is not None:
            await self.gate.wait()
        self._maybe_fail("list_archived")
        return list(self.archived)

    async def set_archived(self, session_id: str, archived: bool) -> None:
        self.calls.append(("set_archived", (session_id, archived)))
        if session_id in self.fail_ids:
            raise self.fail_ids[session_id]
        self._maybe_fail("set_archived")
        source, target = (self.active, self.archived) if archived else (self.archived, self.active)
        for session in list(source):
            if session.id == session_id:
                source.remove(session)
                session.archived = archived
                target.append(session)

    async def delete_one(self, session_id: str) -> None:
        self.calls.append(("delete_one", session_id))
        self._maybe_fail("delete_one")
        self.active = [s for s in self.active if s.id != session_id]

    async def delete_all(self, owner_token: str) -> None:
        self.calls.append(("delete_all", owner_token))
        self._maybe_fail("delete_all")
        self.active, self.archived = [], []

    async def export_all(self, owner_token: str) -> bytes:
        self.calls.append(("export_all", owner_token))
        self._maybe_fail("export_all")
        return b'{"chats": []}'

    async def rename(self, session_id: str, title: str) -> None:
        self.calls.append(("rename", (session_id, title)))
        self._maybe_fail("rename")
        for session in self.active:
            if session.id == session_id:
                session.title = title

    async def set_shared(self, session_id: str, shared: bool) -> Optional[str]:
        self.calls.append(("set_shared", (session_id, shared)))
        self._maybe_fail("set_shared")
        return f"https://chat.test/share/{session_id}" if shared else None


def failure(status: int = 500) -> UnexpectedStatus:
    return UnexpectedStatus(status, f"HTTP {status}: boom")


@pytest.fixture
def bus() -> InvalidationBus:
    return InvalidationBus()


class Toasts(list):
    def __call__(self, message: str) -> None:
        self.append(message)


@pytest.fixture
def toasts() -> Toasts:
    return Toasts()
