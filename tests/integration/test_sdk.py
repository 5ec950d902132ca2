"""
Integration tests for the chat-sessions client, run against a real session store.

Requires environment variables:
  CHAT_SESSIONS_TOKEN    owner token with at least one existing chat
  CHAT_SESSIONS_API_URL  (optional) defaults to http://localhost:3001/api

Run: CHAT_SESSIONS_INTEGRATION=1 pytest tests/integration/ -v

The delete-all test is destructive and only runs with CHAT_SESSIONS_DESTRUCTIVE=1.
"""

import os

import pytest

from chat_sessions import AsyncChatSessions
from chat_sessions.controllers.history import ListState
from chat_sessions.transport.http import DEFAULT_API_URL

SKIP = not os.environ.get("CHAT_SESSIONS_INTEGRATION")
DESTRUCTIVE = bool(os.environ.get("CHAT_SESSIONS_DESTRUCTIVE"))
OWNER_TOKEN = os.environ.get("CHAT_SESSIONS_TOKEN", "")
API_URL = os.environ.get("CHAT_SESSIONS_API_URL", DEFAULT_API_URL)

pytestmark = pytest.mark.skipif(SKIP, reason="CHAT_SESSIONS_INTEGRATION not set")


def make_client() -> AsyncChatSessions:
    return AsyncChatSessions(owner_token=OWNER_TOKEN, api_url=API_URL)


class TestHistory:

    @pytest.mark.asyncio
    async def test_lists_and_groups(self):
        async with make_client() as client:
            await client.history.mount()
            assert client.history.state is ListState.READY
            grouped = sum(len(v) for v in client.history.current_groups().values())
            assert grouped == len(client.history.sessions)


class TestArchiveRoundTrip:

    @pytest.mark.asyncio
    async def test_archive_then_restore(self):
        async with make_client() as client:
            await client.history.mount()
            if not client.history.sessions:
                pytest.skip("owner has no chats")
            session_id = client.history.sessions[0].id

            assert await client.history.archive(session_id)
            await client.history.settle()
            assert session_id not in {s.id for s in client.history.sessions}

            async with client.archive_dialog().dialog() as archive:
                assert session_id in {s.id for s in archive.sessions}
                assert await archive.unarchive(session_id)
            await client.history.settle()
            assert session_id in {s.id for s in client.history.sessions}


class TestExport:

    @pytest.mark.asyncio
    async def test_export_returns_bytes(self):
        async with make_client() as client:
            result = await client.bulk_actions().export_all()
            assert result.ok
            assert isinstance(result.data, bytes)


@pytest.mark.skipif(not DESTRUCTIVE, reason="CHAT_SESSIONS_DESTRUCTIVE not set")
class TestDeleteAll:

    @pytest.mark.asyncio
    async def test_delete_all_empties_history(self):
        async with make_client() as client:
            result = await client.bulk_actions(redirect=False).delete_all()
            assert result.ok
            assert await client.gateway.list_active(OWNER_TOKEN) == []
