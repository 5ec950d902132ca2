"""
chat-sessions: chat history client for Python.

Lists, groups, archives, shares, exports and deletes chat sessions held by a
remote session store, keeping local views in step through an invalidation bus.
"""

from chat_sessions.client import AsyncChatSessions
from chat_sessions.bus import ALL, Invalidation, InvalidationBus
from chat_sessions.gateway import RemoteSessionGateway
from chat_sessions.grouping import format_time_difference, group_sessions
from chat_sessions.models.session import SessionRecord, derive_title
from chat_sessions.controllers import (
    ArchiveController,
    BulkActionController,
    BulkFlow,
    BulkResult,
    SessionListController,
)
from chat_sessions.errors import (
    ChatSessionsError,
    InvalidTransition,
    MalformedResponse,
    TransportError,
    UnexpectedStatus,
)

__version__ = "0.1.0"
__all__ = [
    "AsyncChatSessions",
    "ALL",
    "Invalidation",
    "InvalidationBus",
    "RemoteSessionGateway",
    "SessionRecord",
    "derive_title",
    "format_time_difference",
    "group_sessions",
    "ArchiveController",
    "BulkActionController",
    "BulkFlow",
    "BulkResult",
    "SessionListController",
    "ChatSessionsError",
    "InvalidTransition",
    "MalformedResponse",
    "TransportError",
    "UnexpectedStatus",
]
