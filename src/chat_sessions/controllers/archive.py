"""
Archive dialog controller.

The archived list lives only while the dialog is open: open() always fetches
fresh, close() drops the cache. Each open starts a new generation, and a fetch
that lands after its dialog was closed (or reopened) is discarded.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, Optional

from chat_sessions.bus import InvalidationBus
from chat_sessions.errors import ChatSessionsError, InvalidTransition
from chat_sessions.gateway import RemoteSessionGateway
from chat_sessions.models.session import SessionRecord
from chat_sessions.notifications import Notifier, log_notifier

logger = logging.getLogger(__name__)


class ArchiveState(str, Enum):
    CLOSED = "closed"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class ArchiveController:
    def __init__(
        self,
        gateway: RemoteSessionGateway,
        bus: InvalidationBus,
        owner_token: str,
        notify: Optional[Notifier] = None,
    ):
        self._gateway = gateway
        self._bus = bus
        self._owner_token = owner_token
        self._notify = notify or log_notifier

        self._state = ArchiveState.CLOSED
        self._sessions: list[SessionRecord] = []
        self._error: Optional[ChatSessionsError] = None
        self._fetch_task: Optional[asyncio.Task] = None
        self._stale = False
        self._generation = 0

    @property
    def state(self) -> ArchiveState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is not ArchiveState.CLOSED

    @property
    def error(self) -> Optional[ChatSessionsError]:
        return self._error

    @property
    def sessions(self) -> list[SessionRecord]:
        return list(self._sessions)

    async def open(self) -> None:
        self.close()
        self._generation += 1
        self._state = ArchiveState.LOADING
        await self.refresh()

    def close(self) -> None:
        if self._state is not ArchiveState.CLOSED:
            logger.debug("archive dialog closed")
        self._generation += 1
        self._state = ArchiveState.CLOSED
        self._sessions = []
        self._error = None
        self._fetch_task = None
        self._stale = False

    @asynccontextmanager
    async def dialog(self) -> AsyncIterator["ArchiveController"]:
        """Open for the duration of the block, always closing on exit."""
        await self.open()
        try:
            yield self
        finally:
            self.close()

    async def refresh(self) -> None:
        """Re-fetch the archived list; joins a fetch already in flight."""
        self._ensure_open("refresh")
        if self._fetch_task is None or self._fetch_task.done():
            self._fetch_task = asyncio.ensure_future(self._fetch(self._generation))
        await asyncio.shield(self._fetch_task)

    async def unarchive(self, session_id: str) -> bool:
        """Move a session back to the active list.

        On success the archived list is re-fetched and an invalidation naming
        the session is published so the history list picks it up.
        """
        self._ensure_open("unarchive")
        try:
            await self._gateway.set_archived(session_id, False)
        except ChatSessionsError as e:
            logger.warning(f"unarchive failed for {session_id}: {e}")
            self._notify(f"Failed to unarchive chat: {e}")
            return False
        if self.is_open:
            # A fetch already in flight may predate the change; make it go round once more.
            if self._fetch_task is not None and not self._fetch_task.done():
                self._stale = True
            await self.refresh()
        self._bus.publish(session_id, membership_changed=True)
        return True

    def _ensure_open(self, action: str) -> None:
        if self._state is ArchiveState.CLOSED:
            raise InvalidTransition(f"Cannot {action} while the archive dialog is closed")

    async def _fetch(self, generation: int) -> None:
        while generation == self._generation:
            self._stale = False
            self._state = ArchiveState.LOADING
            try:
                sessions = await self._gateway.list_archived(self._owner_token)
            except ChatSessionsError as e:
                if generation != self._generation:
                    return
                self._state = ArchiveState.ERROR
                self._error = e
                logger.warning(f"Archived chat fetch failed: {e}")
                self._notify(f"Failed to fetch archived chats: {e}")
                return
            if generation != self._generation:
                logger.debug("discarding archived chats for a closed dialog")
                return
            self._sessions = list(sessions)
            self._error = None
            self._state = ArchiveState.READY
            if not self._stale:
                return
