"""
AsyncChatSessions, the session-management context.

Owns the HTTP client, the gateway and the invalidation bus, and hands out
controllers wired to them. The history list is long-lived; archive dialogs and
bulk-action dialogs are created per use.
"""

from typing import Callable, Optional

import httpx

from chat_sessions.bus import InvalidationBus
from chat_sessions.controllers.archive import ArchiveController
from chat_sessions.controllers.bulk import BulkActionController
from chat_sessions.controllers.history import SessionListController
from chat_sessions.gateway import RemoteSessionGateway
from chat_sessions.notifications import Notifier, log_notifier
from chat_sessions.transport.http import DEFAULT_API_URL, HttpClient


class AsyncChatSessions:
    def __init__(
        self,
        owner_token: str,
        api_url: str = DEFAULT_API_URL,
        notify: Optional[Notifier] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not owner_token:
            raise ValueError("owner_token is required")
        self._owner_token = owner_token
        self._notify = notify or log_notifier

        self.http = HttpClient(base_url=api_url, transport=transport)
        self.gateway = RemoteSessionGateway(self.http)
        self.bus = InvalidationBus()
        self.history = SessionListController(self.gateway, self.bus, owner_token, self._notify)

    @property
    def owner_token(self) -> str:
        return self._owner_token

    def archive_dialog(self) -> ArchiveController:
        return ArchiveController(self.gateway, self.bus, self._owner_token, self._notify)

    def bulk_actions(
        self, redirect: bool = True, on_redirect: Optional[Callable[[], None]] = None,
    ) -> BulkActionController:
        return BulkActionController(
            self.gateway, self.bus, self._owner_token, self._notify,
            redirect=redirect, on_redirect=on_redirect,
        )

    async def close(self) -> None:
        self.history.unmount()
        await self.http.close()

    async def __aenter__(self) -> "AsyncChatSessions":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
