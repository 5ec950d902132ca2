"""
Chat session error types.

Every failure surfaced by the gateway is a ChatSessionsError; controllers catch
that base class and report it instead of letting it escape.
"""

from typing import Any, Optional


class ChatSessionsError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class TransportError(ChatSessionsError):
    """The session store could not be reached."""

    def __init__(self, message: str):
        super().__init__("transport_error", message)


class UnexpectedStatus(ChatSessionsError):
    """The store answered with anything other than 200."""

    def __init__(self, status: int, message: str):
        super().__init__("unexpected_status", message, {"status": status})
        self.status = status


class MalformedResponse(ChatSessionsError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("malformed_response", message, details)


class InvalidTransition(ChatSessionsError):
    def __init__(self, message: str):
        super().__init__("invalid_transition", message)
