"""
Repository Classes for Database Access

Each repository handles CRUD operations for a specific domain entity.
"""

from datetime import datetime, timezone
from typing import Optional, Any, Iterable

from .database import Database
from ..logging_config import get_logger
from ..exceptions import (
    AlreadyInTeamError,
    NoPendingRequestError,
    NotInTeamError,
    NotTeamOwnerError,
    TeamNameTakenError,
    TeamNotFoundError,
)

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JoinedPlayerRepository:
    """Repository for players the status poller has seen online."""

    def __init__(self, db: Database):
        self.db = db

    async def record_many(self, names: Iterable[str]) -> None:
        """Insert each name once; names already seen keep their first_seen."""
        params = [(name,) for name in dict.fromkeys(n for n in names if n)]
        if not params:
            return

        await self.db.execute_many(
            "INSERT OR IGNORE INTO joined_players (name) VALUES (?)",
            params
        )

    async def list_all(self) -> list[dict[str, Any]]:
        """All players ever seen, oldest first."""
        return await self.db.fetch_all(
            "SELECT name, first_seen FROM joined_players ORDER BY first_seen, id"
        )


class CoordinateRepository:
    """Repository for coordinate bookmarks."""

    def __init__(self, db: Database):
        self.db = db

    async def save(
        self,
        user_id: int,
        name: str,
        x: int,
        y: int,
        z: int,
        visibility: str,
        description: Optional[str] = None,
        team_id: Optional[int] = None
    ) -> int:
        """Save a bookmark and return its ID."""
        cord_id = await self.db.insert(
            """
            INSERT INTO cords (user_id, name, x, y, z, description, visibility, team_id)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (user_id, name, x, y, z, description, visibility, team_id)
        )

        logger.info(
            "Saved coordinates",
            extra={"user_id": user_id, "cord_id": cord_id, "visibility": visibility}
        )
        return cord_id

    async def list_private(self, user_id: int) -> list[dict[str, Any]]:
        """A user's private bookmarks."""
        return await self.db.fetch_all(
            """
            SELECT * FROM cords
            WHERE user_id = ? AND visibility = 'private'
            ORDER BY created_at, id
            """,
            (user_id,)
        )

    async def list_public(self) -> list[dict[str, Any]]:
        """Every public bookmark."""
        return await self.db.fetch_all(
            """
            SELECT * FROM cords
            WHERE visibility = 'public'
            ORDER BY created_at, id
            """
        )

    async def list_for_team(self, team_id: int) -> list[dict[str, Any]]:
        """Bookmarks shared with a team."""
        return await self.db.fetch_all(
            """
            SELECT * FROM cords
            WHERE visibility = 'team' AND team_id = ?
            ORDER BY created_at, id
            """,
            (team_id,)
        )

    async def delete(self, user_id: int, name: str) -> int:
        """Delete a user's bookmarks with this name. Returns rows removed."""
        return await self.db.execute(
            "DELETE FROM cords WHERE user_id = ? AND name = ?",
            (user_id, name)
        )


class TeamRepository:
    """Repository for teams, memberships and join requests."""

    def __init__(self, db: Database):
        self.db = db

    async def get_by_name(self, name: str) -> Optional[dict[str, Any]]:
        """Get team by name (case-insensitive)."""
        return await self.db.fetch_one(
            "SELECT * FROM teams WHERE name = ? COLLATE NOCASE",
            (name,)
        )

    async def get_for_user(self, user_id: int) -> Optional[dict[str, Any]]:
        """Get the team a user belongs to."""
        return await self.db.fetch_one(
            """
            SELECT t.* FROM teams t
            JOIN team_members m ON m.team_id = t.id
            WHERE m.user_id = ?
            """,
            (user_id,)
        )

    async def create(self, name: str, owner_id: int) -> dict[str, Any]:
        """
        Create a team owned by owner_id, who becomes its first member.

        Raises:
            AlreadyInTeamError: Owner already has a team
            TeamNameTakenError: Name in use
        """
        current = await self.get_for_user(owner_id)
        if current:
            raise AlreadyInTeamError(owner_id, current["name"])

        if await self.get_by_name(name):
            raise TeamNameTakenError(name)

        team_id = await self.db.insert(
            "INSERT INTO teams (name, owner_id) VALUES (?, ?)",
            (name, owner_id)
        )
        await self.db.execute(
            "INSERT INTO team_members (team_id, user_id) VALUES (?, ?)",
            (team_id, owner_id)
        )
        # Requests the owner filed elsewhere are moot now
        await self.db.execute(
            "DELETE FROM team_join_requests WHERE user_id = ?",
            (owner_id,)
        )

        logger.info(f"Created team {name}", extra={"team_id": team_id, "owner_id": owner_id})

        return await self.db.fetch_one("SELECT * FROM teams WHERE id = ?", (team_id,))

    async def request_join(self, name: str, user_id: int) -> dict[str, Any]:
        """
        File a join request. Returns the team.

        Raises:
            TeamNotFoundError: No such team
            AlreadyInTeamError: User already has a team
        """
        team = await self.get_by_name(name)
        if not team:
            raise TeamNotFoundError(name)

        current = await self.get_for_user(user_id)
        if current:
            raise AlreadyInTeamError(user_id, current["name"])

        await self.db.execute(
            "INSERT OR IGNORE INTO team_join_requests (team_id, user_id) VALUES (?, ?)",
            (team["id"], user_id)
        )
        return team

    async def _owned_team(self, owner_id: int) -> dict[str, Any]:
        team = await self.get_for_user(owner_id)
        if not team:
            raise NotInTeamError(owner_id)
        if team["owner_id"] != owner_id:
            raise NotTeamOwnerError(owner_id, team["name"])
        return team

    async def list_requests(self, owner_id: int) -> list[dict[str, Any]]:
        """Pending requests for the team owned by owner_id."""
        team = await self._owned_team(owner_id)
        return await self.db.fetch_all(
            """
            SELECT user_id, created_at FROM team_join_requests
            WHERE team_id = ?
            ORDER BY created_at
            """,
            (team["id"],)
        )

    async def accept(self, owner_id: int, user_id: int) -> dict[str, Any]:
        """
        Accept a pending request into the owner's team.

        Raises:
            NotInTeamError / NotTeamOwnerError: Caller cannot manage a team
            NoPendingRequestError: No request from user_id
            AlreadyInTeamError: User joined another team in the meantime
        """
        team = await self._owned_team(owner_id)

        removed = await self.db.execute(
            "DELETE FROM team_join_requests WHERE team_id = ? AND user_id = ?",
            (team["id"], user_id)
        )
        if not removed:
            raise NoPendingRequestError(user_id, team["name"])

        current = await self.get_for_user(user_id)
        if current:
            raise AlreadyInTeamError(user_id, current["name"])

        await self.db.execute(
            "INSERT INTO team_members (team_id, user_id) VALUES (?, ?)",
            (team["id"], user_id)
        )
        await self.db.execute(
            "DELETE FROM team_join_requests WHERE user_id = ?",
            (user_id,)
        )

        logger.info(f"User {user_id} joined team {team['name']}")
        return team

    async def deny(self, owner_id: int, user_id: int) -> dict[str, Any]:
        """Drop a pending request. Raises like accept()."""
        team = await self._owned_team(owner_id)

        removed = await self.db.execute(
            "DELETE FROM team_join_requests WHERE team_id = ? AND user_id = ?",
            (team["id"], user_id)
        )
        if not removed:
            raise NoPendingRequestError(user_id, team["name"])
        return team

    async def leave(self, user_id: int) -> tuple[dict[str, Any], bool]:
        """
        Leave the current team.

        When the owner leaves the team is disbanded: its team-only
        bookmarks fall back to their authors as private ones.

        Returns:
            (team, disbanded)

        Raises:
            NotInTeamError: User has no team
        """
        team = await self.get_for_user(user_id)
        if not team:
            raise NotInTeamError(user_id)

        if team["owner_id"] == user_id:
            await self.db.execute(
                """
                UPDATE cords SET visibility = 'private', team_id = NULL
                WHERE team_id = ? AND visibility = 'team'
                """,
                (team["id"],)
            )
            await self.db.execute("DELETE FROM teams WHERE id = ?", (team["id"],))
            logger.info(f"Team {team['name']} disbanded by its owner")
            return team, True

        await self.db.execute(
            "DELETE FROM team_members WHERE team_id = ? AND user_id = ?",
            (team["id"], user_id)
        )
        return team, False

    async def list_members(self, team_id: int) -> list[int]:
        """Member user IDs, in join order."""
        rows = await self.db.fetch_all(
            "SELECT user_id FROM team_members WHERE team_id = ? ORDER BY joined_at, rowid",
            (team_id,)
        )
        return [row["user_id"] for row in rows]

    async def list_all(self) -> list[dict[str, Any]]:
        """All teams with their member counts."""
        return await self.db.fetch_all(
            """
            SELECT t.id, t.name, t.owner_id, COUNT(m.user_id) AS member_count
            FROM teams t
            LEFT JOIN team_members m ON m.team_id = t.id
            GROUP BY t.id
            ORDER BY t.name COLLATE NOCASE
            """
        )


class WarningRepository:
    """Repository for moderation warnings."""

    def __init__(self, db: Database):
        self.db = db

    async def add(
        self,
        guild_id: int,
        user_id: int,
        reason: str,
        moderator_id: Optional[int] = None
    ) -> int:
        """Record a warning. moderator_id None means automatic."""
        warning_id = await self.db.insert(
            """
            INSERT INTO warnings (guild_id, user_id, moderator_id, reason)
            VALUES (?, ?, ?, ?)
            """,
            (guild_id, user_id, moderator_id, reason)
        )
        logger.info(
            "Warning recorded",
            extra={"guild_id": guild_id, "user_id": user_id, "automatic": moderator_id is None}
        )
        return warning_id

    async def list_for_user(self, guild_id: int, user_id: int) -> list[dict[str, Any]]:
        return await self.db.fetch_all(
            """
            SELECT * FROM warnings
            WHERE guild_id = ? AND user_id = ?
            ORDER BY created_at, id
            """,
            (guild_id, user_id)
        )

    async def clear_for_user(self, guild_id: int, user_id: int) -> int:
        return await self.db.execute(
            "DELETE FROM warnings WHERE guild_id = ? AND user_id = ?",
            (guild_id, user_id)
        )


class GrassRepository:
    """
    Repository for voice activity ("touch grass") accounts.

    Scores only ever grow: every change goes through add_score(), a single
    INSERT ... ON CONFLICT statement, so concurrent increments for the same
    user are serialized by SQLite rather than by a read-then-write cycle.
    """

    def __init__(self, db: Database):
        self.db = db

    async def add_score(
        self,
        user_id: int,
        display_name: str,
        increment: int,
        now: Optional[datetime] = None
    ) -> int:
        """
        Upsert an account, adding increment to its total.

        display_name and last_update are refreshed on every call.

        Returns:
            The account's new total_score

        Raises:
            ValueError: On a negative increment
        """
        if increment < 0:
            raise ValueError(f"Grass increments must be non-negative, got {increment}")

        now = now or _utcnow()

        await self.db.execute(
            """
            INSERT INTO grass (user_id, display_name, total_score, last_update)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                total_score = grass.total_score + excluded.total_score,
                display_name = excluded.display_name,
                last_update = excluded.last_update
            """,
            (user_id, display_name, increment, now.isoformat())
        )

        row = await self.db.fetch_one(
            "SELECT total_score FROM grass WHERE user_id = ?",
            (user_id,)
        )
        return row["total_score"] if row else increment

    async def get(self, user_id: int) -> Optional[dict[str, Any]]:
        return await self.db.fetch_one(
            "SELECT user_id, display_name, total_score, last_update FROM grass WHERE user_id = ?",
            (user_id,)
        )

    async def top(self, limit: int = 10) -> list[dict[str, Any]]:
        """Top accounts by score; ties keep insertion order."""
        return await self.db.fetch_all(
            """
            SELECT user_id, display_name, total_score, last_update FROM grass
            ORDER BY total_score DESC, id ASC
            LIMIT ?
            """,
            (limit,)
        )

    async def summary(self) -> tuple[int, int]:
        """(sum of all scores, number of accounts)"""
        row = await self.db.fetch_one(
            "SELECT COALESCE(SUM(total_score), 0) AS total, COUNT(*) AS accounts FROM grass"
        )
        if row is None:
            return 0, 0
        return row["total"], row["accounts"]
