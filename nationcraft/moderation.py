"""
Moderation Helpers

- Spam detection: message floods and repeated messages per user
- Formatting of warning lists for the /warnings command
"""

import time
from collections import deque
from typing import Any, Callable, Optional

from .config import ModerationConfig
from .logging_config import get_logger

logger = get_logger(__name__)

AUTO_MODERATOR_LABEL = "AutoMod"


def _normalize(content: str) -> str:
    return " ".join(content.lower().split())


class SpamDetector:
    """
    Sliding-window spam detector.

    A user is flagged when, inside one window, they send more than
    message_limit messages or the same text duplicate_limit times. After
    a flag the user's history is reset and they cannot be flagged again
    until the window has passed, so one burst yields one warning.
    """

    def __init__(
        self,
        message_limit: int = 5,
        window_seconds: float = 5.0,
        duplicate_limit: int = 3,
        clock: Callable[[], float] = time.monotonic
    ):
        self.message_limit = message_limit
        self.window_seconds = window_seconds
        self.duplicate_limit = duplicate_limit
        self.clock = clock
        self._history: dict[int, deque[tuple[float, str]]] = {}
        self._quiet_until: dict[int, float] = {}
        self._next_sweep = 0.0

    @classmethod
    def from_config(cls, config: ModerationConfig) -> "SpamDetector":
        return cls(
            message_limit=config.spam_message_limit,
            window_seconds=config.spam_window_seconds,
            duplicate_limit=config.spam_duplicate_limit,
        )

    def check(self, user_id: int, content: str) -> Optional[str]:
        """
        Record a message and decide whether it is spam.

        Returns:
            A human-readable reason when the message trips a limit, else None
        """
        now = self.clock()
        if now >= self._next_sweep:
            self._sweep(now)

        history = self._history.setdefault(user_id, deque())
        self._prune(history, now)

        text = _normalize(content or "")
        history.append((now, text))

        if self._quiet_until.get(user_id, 0.0) > now:
            return None
        self._quiet_until.pop(user_id, None)

        reason = None
        if len(history) > self.message_limit:
            reason = (
                f"sending more than {self.message_limit} messages "
                f"in {self.window_seconds:g} seconds"
            )
        elif text and sum(1 for _, seen in history if seen == text) >= self.duplicate_limit:
            reason = "repeating the same message"

        if reason:
            del self._history[user_id]
            self._quiet_until[user_id] = now + self.window_seconds
            logger.info(f"Spam detected for user {user_id}: {reason}")

        return reason

    def _prune(self, history: deque, now: float) -> None:
        while history and now - history[0][0] > self.window_seconds:
            history.popleft()

    def _sweep(self, now: float) -> None:
        """Drop users with nothing left in the window"""
        for user_id in list(self._history):
            history = self._history[user_id]
            self._prune(history, now)
            if not history:
                del self._history[user_id]
        for user_id, until in list(self._quiet_until.items()):
            if until <= now:
                del self._quiet_until[user_id]
        self._next_sweep = now + self.window_seconds

    def forget(self, user_id: int) -> None:
        self._history.pop(user_id, None)
        self._quiet_until.pop(user_id, None)

    @property
    def tracked_users(self) -> int:
        return len(self._history)


def format_warnings(display_name: str, warnings: list[dict[str, Any]]) -> str:
    """Render a user's warnings, oldest first"""
    if not warnings:
        return f"✅ **{display_name}** has no warnings."

    lines = [f"⚠️ **{display_name}** has {len(warnings)} warning(s):"]
    for index, warning in enumerate(warnings, start=1):
        moderator = (
            f"<@{warning['moderator_id']}>" if warning.get("moderator_id") else AUTO_MODERATOR_LABEL
        )
        created = str(warning.get("created_at", ""))[:16]
        lines.append(f"`{index}.` {warning['reason']} ({moderator}, {created})")
    return "\n".join(lines)
