"""User-facing notifications ("toasts"). A notifier is any callable taking one message."""

import logging
from typing import Callable

Notifier = Callable[[str], None]

logger = logging.getLogger("chat_sessions")


def log_notifier(message: str) -> None:
    logger.warning(message)
