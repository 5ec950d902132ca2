"""
Bulk actions: archive all, delete all, export all.

Each flow is a confirmation dialog: idle -> confirming -> executing -> idle.
Only one flow can be past idle at a time. Cancelling is allowed while
confirming, never once execution has been dispatched.

Archive-all is best-effort: it archives one session at a time from its own
fresh copy of the active list, reports every failure and keeps going, so a
batch can end partly applied. Nothing is retried.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from chat_sessions.bus import ALL, InvalidationBus
from chat_sessions.errors import ChatSessionsError, InvalidTransition
from chat_sessions.gateway import RemoteSessionGateway
from chat_sessions.notifications import Notifier, log_notifier

logger = logging.getLogger(__name__)


class BulkFlow(str, Enum):
    ARCHIVE_ALL = "archive_all"
    DELETE_ALL = "delete_all"
    EXPORT_ALL = "export_all"


class BulkState(str, Enum):
    IDLE = "idle"
    CONFIRMING = "confirming"
    EXECUTING = "executing"


class BulkResult:
    __slots__ = ("flow", "succeeded", "failed", "data")

    def __init__(self, flow: BulkFlow):
        self.flow = flow
        self.succeeded: list[str] = []
        # session id (or "all" for whole-collection calls) -> error
        self.failed: dict[str, ChatSessionsError] = {}
        self.data: Optional[bytes] = None

    @property
    def ok(self) -> bool:
        return not self.failed

    def __repr__(self) -> str:
        return f"BulkResult(flow={self.flow.value!r}, succeeded={len(self.succeeded)}, failed={sorted(self.failed)!r})"


class BulkActionController:
    def __init__(
        self,
        gateway: RemoteSessionGateway,
        bus: InvalidationBus,
        owner_token: str,
        notify: Optional[Notifier] = None,
        redirect: bool = True,
        on_redirect: Optional[Callable[[], None]] = None,
    ):
        self._gateway = gateway
        self._bus = bus
        self._owner_token = owner_token
        self._notify = notify or log_notifier
        self._redirect = redirect
        self._on_redirect = on_redirect

        self._state = BulkState.IDLE
        self._flow: Optional[BulkFlow] = None

    @property
    def state(self) -> BulkState:
        return self._state

    @property
    def flow(self) -> Optional[BulkFlow]:
        return self._flow

    def request(self, flow: BulkFlow) -> None:
        """Open the confirmation step for a flow."""
        if self._state is not BulkState.IDLE:
            raise InvalidTransition(f"Cannot start {flow.value}: {self._flow.value} is {self._state.value}")
        self._flow = flow
        self._state = BulkState.CONFIRMING

    def cancel(self) -> bool:
        """Back out of the confirmation step. Returns False once execution has started."""
        if self._state is BulkState.EXECUTING:
            return False
        self._state = BulkState.IDLE
        self._flow = None
        return True

    async def confirm(self) -> BulkResult:
        if self._state is not BulkState.CONFIRMING or self._flow is None:
            raise InvalidTransition(f"Nothing to confirm (state {self._state.value})")
        flow = self._flow
        self._state = BulkState.EXECUTING
        logger.debug(f"executing {flow.value}")
        try:
            if flow is BulkFlow.ARCHIVE_ALL:
                result = await self._archive_all()
            elif flow is BulkFlow.DELETE_ALL:
                result = await self._delete_all()
            else:
                result = await self._export_all()
        finally:
            self._state = BulkState.IDLE
            self._flow = None
        return result

    async def archive_all(self) -> BulkResult:
        self.request(BulkFlow.ARCHIVE_ALL)
        return await self.confirm()

    async def delete_all(self) -> BulkResult:
        self.request(BulkFlow.DELETE_ALL)
        return await self.confirm()

    async def export_all(self) -> BulkResult:
        self.request(BulkFlow.EXPORT_ALL)
        return await self.confirm()

    async def _archive_all(self) -> BulkResult:
        result = BulkResult(BulkFlow.ARCHIVE_ALL)
        try:
            sessions = await self._gateway.list_active(self._owner_token)
        except ChatSessionsError as e:
            return self._whole_failed(result, "archive all chats", e)

        for session in sessions:
            try:
                await self._gateway.set_archived(session.id, True)
            except ChatSessionsError as e:
                logger.warning(f"archive failed for {session.id}: {e}")
                self._notify(f"Failed to archive chat {session.id}: {e}")
                result.failed[session.id] = e
                continue
            result.succeeded.append(session.id)

        if result.succeeded or result.ok:
            self._bus.publish(ALL)
        logger.info(f"archived {len(result.succeeded)} chat(s), {len(result.failed)} failed")
        return result

    async def _delete_all(self) -> BulkResult:
        result = BulkResult(BulkFlow.DELETE_ALL)
        try:
            await self._gateway.delete_all(self._owner_token)
        except ChatSessionsError as e:
            return self._whole_failed(result, "delete chats", e)
        result.succeeded.append(ALL)
        self._bus.publish(ALL)
        if self._redirect and self._on_redirect is not None:
            self._on_redirect()
        return result

    async def _export_all(self) -> BulkResult:
        result = BulkResult(BulkFlow.EXPORT_ALL)
        try:
            result.data = await self._gateway.export_all(self._owner_token)
        except ChatSessionsError as e:
            return self._whole_failed(result, "export chats", e)
        result.succeeded.append(ALL)
        self._bus.publish(ALL)
        return result

    def _whole_failed(self, result: BulkResult, action: str, error: ChatSessionsError) -> BulkResult:
        logger.warning(f"{result.flow.value} failed: {error}")
        self._notify(f"Failed to {action}: {error}")
        result.failed[ALL] = error
        return result
