"""
Interior Tracker - Notification Service
Transient success/error toasts for the HTML views
"""
import logging
from typing import Dict, List

from starlette.requests import Request

logger = logging.getLogger(__name__)

NOTIFICATIONS_KEY = "notifications"


class Notifier:
    """
    Fire-and-forget toasts.

    Messages are queued in the signed cookie session so they survive the
    redirect that follows every form submit, then shown once and dropped.
    """

    def __init__(self, request: Request):
        self.request = request

    def _push(self, level: str, message: str) -> None:
        queue = list(self.request.session.get(NOTIFICATIONS_KEY, []))
        queue.append({"level": level, "message": message})
        self.request.session[NOTIFICATIONS_KEY] = queue

    def success(self, message: str) -> None:
        self._push("success", message)

    def error(self, message: str) -> None:
        logger.info(f"Reporting error to user: {message}")
        self._push("error", message)


def pop_notifications(request: Request) -> List[Dict[str, str]]:
    """Take every pending toast; each is rendered exactly once."""
    return request.session.pop(NOTIFICATIONS_KEY, [])
