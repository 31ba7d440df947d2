"""
Voice activity ("touch grass") data types.

Inputs to the tracker are immutable event values; its outputs are effect
values that GrassService carries out against the database and Discord.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union


@dataclass(frozen=True)
class VoiceSession:
    """An open voice presence, held in memory until the user leaves voice"""
    user_id: int
    joined_at: datetime
    self_muted: bool
    self_deafened: bool


@dataclass(frozen=True)
class PresenceChange:
    """One voice-state update from the gateway"""
    user_id: int
    display_name: str
    was_in_channel: bool
    is_in_channel: bool
    self_muted: bool
    self_deafened: bool
    now: datetime
    is_bot: bool = False


@dataclass(frozen=True)
class GrassAccount:
    """A persisted per-user score row"""
    user_id: int
    display_name: str
    total_score: int
    last_update: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "GrassAccount":
        return cls(
            user_id=row["user_id"],
            display_name=row["display_name"],
            total_score=row["total_score"],
            last_update=row.get("last_update"),
        )


@dataclass(frozen=True)
class GrassSummary:
    """Server-wide totals shown on the scheduled display"""
    total_score: int
    account_count: int
    connected_now: int


# ==================== Effects ====================

@dataclass(frozen=True)
class Upsert:
    """Add increment to a user's account, creating it if needed"""
    user_id: int
    display_name: str
    increment: int
    now: datetime


@dataclass(frozen=True)
class SendDisplay:
    """Post a new summary message"""
    content: str


@dataclass(frozen=True)
class EditDisplay:
    """Edit the summary message posted earlier"""
    message_id: int
    content: str


DisplayEffect = Union[SendDisplay, EditDisplay]
