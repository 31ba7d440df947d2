"""
Voice activity ("touch grass") tracking

Members earn points for time spent in voice channels and for pressing
the touch-grass button.
"""

from .models import GrassAccount, GrassSummary, PresenceChange, VoiceSession
from .tracker import GrassTracker, TOUCH_BUTTON_ID, LEADERBOARD_BUTTON_ID
from .service import GrassService, format_leaderboard, format_summary

__all__ = [
    "GrassAccount",
    "GrassSummary",
    "PresenceChange",
    "VoiceSession",
    "GrassTracker",
    "GrassService",
    "TOUCH_BUTTON_ID",
    "LEADERBOARD_BUTTON_ID",
    "format_leaderboard",
    "format_summary",
]
