"""
History list controller: the local view of non-archived sessions.

States: idle -> loading -> ready | error. The cache is replaced wholesale by
each successful fetch and kept as-is when a fetch fails, so a refresh error
never blanks the list. Only one fetch runs at a time:

- refresh() while loading joins the running fetch.
- invalidations while loading mark the cache stale; however many arrive, they
  cause a single follow-up fetch once the running one finishes.

Item actions (archive, delete, rename, share) are confirm-then-refetch: the
cache is never patched from a mutation result. Each success publishes an
invalidation on the bus, which brings this controller (and any other
subscriber) back to loading.
"""

import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from chat_sessions.bus import Invalidation, InvalidationBus
from chat_sessions.errors import ChatSessionsError
from chat_sessions.gateway import RemoteSessionGateway
from chat_sessions.grouping import group_sessions
from chat_sessions.models.session import SessionRecord
from chat_sessions.notifications import Notifier, log_notifier

logger = logging.getLogger(__name__)


class ListState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class SessionListController:
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

        self._state = ListState.IDLE
        self._sessions: list[SessionRecord] = []
        self._error: Optional[ChatSessionsError] = None
        self._fetch_task: Optional[asyncio.Task] = None
        self._stale = False
        self._generation = 0
        self._unsubscribe = None

    @property
    def state(self) -> ListState:
        return self._state

    @property
    def error(self) -> Optional[ChatSessionsError]:
        """The last fetch failure, cleared by the next successful fetch."""
        return self._error

    @property
    def sessions(self) -> list[SessionRecord]:
        return list(self._sessions)

    @property
    def mounted(self) -> bool:
        return self._unsubscribe is not None

    @property
    def stale(self) -> bool:
        """True when an invalidation is waiting for a fetch to pick it up."""
        return self._stale

    async def mount(self) -> None:
        """Subscribe to invalidations and load the list."""
        if self._unsubscribe is None:
            self._unsubscribe = self._bus.subscribe(self.on_mutation_complete)
        await self.refresh()

    def unmount(self) -> None:
        """Unsubscribe. A fetch still in flight is discarded when it lands."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._generation += 1
        self._fetch_task = None
        self._stale = False
        self._state = ListState.IDLE

    async def refresh(self) -> None:
        if self._fetch_task is None or self._fetch_task.done():
            self._fetch_task = asyncio.ensure_future(self._fetch(self._generation))
        await asyncio.shield(self._fetch_task)

    async def settle(self) -> None:
        """Wait until no fetch is in flight, follow-up fetches included."""
        while self._fetch_task is not None and not self._fetch_task.done():
            await asyncio.shield(self._fetch_task)

    def on_mutation_complete(self, signal: Union[Invalidation, str]) -> None:
        """Invalidation entry point; accepts a signal or a bare session id / "all".

        Outside a running event loop no fetch can be started. The list is then
        only marked stale and the next refresh() loads it.
        """
        if isinstance(signal, str):
            signal = Invalidation(signal)
        if not self._affected_by(signal):
            logger.debug(f"ignoring {signal!r}")
            return
        if self._fetch_task is not None and not self._fetch_task.done():
            self._stale = True
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"no running loop for {signal!r}, deferring fetch to the next refresh")
            self._stale = True
            return
        self._fetch_task = loop.create_task(self._fetch(self._generation))

    def current_groups(self, now: Optional[datetime] = None) -> dict[str, list[SessionRecord]]:
        return group_sessions(self._sessions, now or datetime.now().astimezone())

    def shared_sessions(self) -> list[SessionRecord]:
        return [s for s in self._sessions if s.shared]

    def _affected_by(self, signal: Invalidation) -> bool:
        if signal.is_all or signal.membership_changed:
            return True
        return any(s.id == signal.target for s in self._sessions)

    async def _fetch(self, generation: int) -> None:
        while generation == self._generation:
            self._stale = False
            self._state = ListState.LOADING
            try:
                sessions = await self._gateway.list_active(self._owner_token)
            except ChatSessionsError as e:
                if generation != self._generation:
                    return
                self._state = ListState.ERROR
                self._error = e
                logger.warning(f"Chat list fetch failed, keeping {len(self._sessions)} cached: {e}")
                self._notify(f"Failed to fetch chats: {e}")
                return
            if generation != self._generation:
                return
            self._sessions = list(sessions)
            self._error = None
            self._state = ListState.READY
            logger.debug(f"chat list ready with {len(self._sessions)} session(s)")
            if not self._stale:
                return

    # Item actions

    def _failed(self, action: str, session_id: str, error: ChatSessionsError) -> None:
        logger.warning(f"{action} failed for {session_id}: {error}")
        self._notify(f"Failed to {action} chat: {error}")

    async def archive(self, session_id: str) -> bool:
        try:
            await self._gateway.set_archived(session_id, True)
        except ChatSessionsError as e:
            self._failed("archive", session_id, e)
            return False
        self._bus.publish(session_id)
        return True

    async def delete(self, session_id: str) -> bool:
        """Permanently remove one session."""
        try:
            await self._gateway.delete_one(session_id)
        except ChatSessionsError as e:
            self._failed("delete", session_id, e)
            return False
        self._bus.publish(session_id)
        return True

    async def rename(self, session_id: str, title: str) -> bool:
        try:
            await self._gateway.rename(session_id, title)
        except ChatSessionsError as e:
            self._failed("rename", session_id, e)
            return False
        self._bus.publish(session_id)
        return True

    async def share(self, session_id: str) -> Optional[str]:
        """Enable the public link.

        Returns the share URL, an empty string when the store sends none, or
        None on failure.
        """
        try:
            url = await self._gateway.set_shared(session_id, True)
        except ChatSessionsError as e:
            self._failed("share", session_id, e)
            return None
        self._bus.publish(session_id)
        return url or ""

    async def unshare(self, session_id: str) -> bool:
        try:
            await self._gateway.set_shared(session_id, False)
        except ChatSessionsError as e:
            self._failed("unshare", session_id, e)
            return False
        self._bus.publish(session_id)
        return True
