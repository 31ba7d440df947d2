"""
Voice Activity Tracker

Turns "entered voice" / "left voice" transitions into score increments.

Per user the tracker is either Idle (no open session) or Active:
- Idle + entered voice: open a session, remembering the join time and
  whether the user was self-muted or self-deafened at that moment.
- Active + left voice: close the session. Sessions shorter than 30 seconds
  earn nothing; otherwise the user earns floor(seconds * 2), or
  floor(seconds * 1) if they joined muted or deafened.

Moving between channels is neither an enter nor a leave, so the session
keeps running. A second "entered" without a "left" in between replaces
the open session and the first segment earns nothing.

All state lives on the GrassTracker instance. Methods are synchronous, so
between two awaits in the event loop the session map is never observed
half-updated.
"""

import math
from datetime import datetime
from typing import Optional

from .models import (
    DisplayEffect,
    EditDisplay,
    PresenceChange,
    SendDisplay,
    Upsert,
    VoiceSession,
)
from ..logging_config import get_logger

logger = get_logger(__name__)

MIN_SESSION_SECONDS = 30
ACTIVE_MULTIPLIER = 2
MUTED_MULTIPLIER = 1
MANUAL_TOUCH_POINTS = 1

# custom_id values of the two buttons on the summary message
TOUCH_BUTTON_ID = "grass:touch"
LEADERBOARD_BUTTON_ID = "grass:leaderboard"


def session_multiplier(session: VoiceSession) -> int:
    if session.self_muted or session.self_deafened:
        return MUTED_MULTIPLIER
    return ACTIVE_MULTIPLIER


def compute_increment(
    session: VoiceSession,
    left_at: datetime,
    min_session_seconds: int = MIN_SESSION_SECONDS
) -> int:
    """Points earned by a session that ended at left_at"""
    elapsed = (left_at - session.joined_at).total_seconds()
    if elapsed < min_session_seconds:
        return 0
    return math.floor(elapsed * session_multiplier(session))


class GrassTracker:
    """
    In-memory half of the grass feature.

    Created once at startup and shared by the voice event handler, the
    buttons and the display loop.
    """

    def __init__(self, min_session_seconds: int = MIN_SESSION_SECONDS):
        self.min_session_seconds = min_session_seconds
        self.sessions: dict[int, VoiceSession] = {}
        self.display_message_id: Optional[int] = None

    def on_voice_presence_changed(self, change: PresenceChange) -> tuple[Upsert, ...]:
        """
        Apply one voice-state update.

        Returns:
            At most one Upsert to perform. Never raises.
        """
        if change.is_bot:
            return ()

        if not change.was_in_channel and change.is_in_channel:
            if change.user_id in self.sessions:
                logger.debug(f"Replacing open voice session for user {change.user_id}")
            self.sessions[change.user_id] = VoiceSession(
                user_id=change.user_id,
                joined_at=change.now,
                self_muted=change.self_muted,
                self_deafened=change.self_deafened,
            )
            return ()

        if change.was_in_channel and not change.is_in_channel:
            session = self.sessions.pop(change.user_id, None)
            if session is None:
                # e.g. the user joined before the bot restarted
                logger.info(f"User {change.user_id} left voice with no open session, ignoring")
                return ()

            increment = compute_increment(session, change.now, self.min_session_seconds)
            if increment <= 0:
                logger.debug(f"Voice session for user {change.user_id} too short to score")
                return ()

            return (Upsert(
                user_id=change.user_id,
                display_name=change.display_name,
                increment=increment,
                now=change.now,
            ),)

        return ()

    def on_manual_touch(self, user_id: int, display_name: str, now: datetime) -> Upsert:
        """The touch button always awards a fixed point, whatever the voice state"""
        return Upsert(
            user_id=user_id,
            display_name=display_name,
            increment=MANUAL_TOUCH_POINTS,
            now=now,
        )

    def plan_display(self, content: str) -> DisplayEffect:
        if self.display_message_id is None:
            return SendDisplay(content=content)
        return EditDisplay(message_id=self.display_message_id, content=content)

    def remember_display(self, message_id: Optional[int]) -> None:
        self.display_message_id = message_id

    def is_active(self, user_id: int) -> bool:
        return user_id in self.sessions
