"""
Database Module for the NationCraft bot

Provides async SQLite database access for:
- Coordinate bookmarks
- Teams, memberships and join requests
- Players seen by the status poller
- Moderation warnings
- Voice activity ("touch grass") accounts
"""

from .database import Database, load_schema
from .repositories import (
    JoinedPlayerRepository,
    CoordinateRepository,
    TeamRepository,
    WarningRepository,
    GrassRepository,
)

__all__ = [
    "Database",
    "load_schema",
    "JoinedPlayerRepository",
    "CoordinateRepository",
    "TeamRepository",
    "WarningRepository",
    "GrassRepository",
]
