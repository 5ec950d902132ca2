"""
Remote session gateway for the chat store's REST surface under `/chats`.

The gateway only talks to the store. Publishing invalidations after a
successful mutation is the calling controller's job.
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

from pydantic import ValidationError

from chat_sessions.errors import MalformedResponse
from chat_sessions.models.session import SessionListResponse, SessionRecord, ShareResponse
from chat_sessions.transport.http import HttpClient

BASE_PATH = "/chats"


def _segment(value: str) -> str:
    return quote(value, safe="")


class RemoteSessionGateway:
    def __init__(self, http: HttpClient):
        self._http = http

    @staticmethod
    def _sessions(payload: Any) -> list[SessionRecord]:
        try:
            return SessionListResponse.model_validate(payload).chats
        except ValidationError as e:
            raise MalformedResponse(f"Unexpected chat list shape: {e.error_count()} error(s)", {"errors": e.errors()}) from e

    async def list_active(self, owner_token: str) -> list[SessionRecord]:
        """Non-archived sessions for the owner."""
        return self._sessions(await self._http.get(f"{BASE_PATH}/{_segment(owner_token)}"))

    async def list_archived(self, owner_token: str) -> list[SessionRecord]:
        return self._sessions(await self._http.get(f"{BASE_PATH}/{_segment(owner_token)}/archived"))

    async def set_archived(self, session_id: str, archived: bool) -> None:
        """Idempotent: setting the flag to its current value still succeeds."""
        await self._http.patch(f"{BASE_PATH}/{_segment(session_id)}/archive", {"archived": int(archived)})

    async def delete_one(self, session_id: str) -> None:
        await self._http.delete(f"{BASE_PATH}/{_segment(session_id)}")

    async def delete_all(self, owner_token: str) -> None:
        await self._http.delete(f"{BASE_PATH}/deleteAll/{_segment(owner_token)}")

    async def export_all(self, owner_token: str) -> bytes:
        """Downloadable dump of every session; the format belongs to the store."""
        return await self._http.get_bytes(f"{BASE_PATH}/export/{_segment(owner_token)}")

    async def rename(self, session_id: str, title: str) -> None:
        await self._http.patch(f"{BASE_PATH}/{_segment(session_id)}/rename", {"title": title})

    async def set_shared(self, session_id: str, shared: bool) -> Optional[str]:
        """Toggle the public link. Returns the share URL when enabling, if the store sends one."""
        payload = await self._http.patch(f"{BASE_PATH}/{_segment(session_id)}/share", {"shared": int(shared)})
        if not shared or not isinstance(payload, dict):
            return None
        try:
            return ShareResponse.model_validate(payload).share_url
        except ValidationError as e:
            raise MalformedResponse(f"Unexpected share response shape: {e.error_count()} error(s)", {"errors": e.errors()}) from e
