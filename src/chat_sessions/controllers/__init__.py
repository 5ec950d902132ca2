from chat_sessions.controllers.archive import ArchiveController, ArchiveState
from chat_sessions.controllers.bulk import BulkActionController, BulkFlow, BulkResult, BulkState
from chat_sessions.controllers.history import ListState, SessionListController

__all__ = [
    "ArchiveController",
    "ArchiveState",
    "BulkActionController",
    "BulkFlow",
    "BulkResult",
    "BulkState",
    "ListState",
    "SessionListController",
]
