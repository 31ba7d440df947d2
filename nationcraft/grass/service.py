"""
Grass Service

Carries out the tracker's effects: score upserts go to the database,
display effects go to a Discord channel.
"""

from datetime import datetime, timezone
from typing import Any, Optional

import discord

from .models import EditDisplay, GrassAccount, GrassSummary, PresenceChange, Upsert
from .tracker import GrassTracker, MANUAL_TOUCH_POINTS
from ..db.repositories import GrassRepository
from ..logging_config import get_logger
from ..validation import MAX_LIMIT, MIN_LIMIT

logger = get_logger(__name__)

MEDALS = ["🥇", "🥈", "🥉"]


def format_summary(summary: GrassSummary) -> str:
    return (
        "🌱 **Touch Grass Tracker**\n"
        f"Total grass touched: **{summary.total_score:,}** points "
        f"across **{summary.account_count}** members\n"
        f"🎧 In voice right now: **{summary.connected_now}**\n"
        "Press 🌱 to touch grass, or 🏆 to see the leaderboard."
    )


def format_leaderboard(accounts: list[GrassAccount]) -> str:
    if not accounts:
        return "Nobody has touched grass yet. Be the first!"

    lines = ["🏆 **Grass Leaderboard**"]
    for position, account in enumerate(accounts, start=1):
        badge = MEDALS[position - 1] if position <= len(MEDALS) else f"`#{position}`"
        lines.append(f"{badge} **{account.display_name}**: {account.total_score:,}")
    return "\n".join(lines)


class GrassService:
    """
    Usage:
        service = GrassService(GrassRepository(db), GrassTracker())
        await service.handle_presence(change)
        text = await service.manual_touch(user.id, user.display_name)
    """

    def __init__(self, repo: GrassRepository, tracker: Optional[GrassTracker] = None):
        self.repo = repo
        self.tracker = tracker or GrassTracker()

    async def _apply(self, effect: Upsert) -> int:
        total = await self.repo.add_score(
            effect.user_id, effect.display_name, effect.increment, effect.now
        )
        logger.info(
            "Grass score updated",
            extra={"user_id": effect.user_id, "increment": effect.increment, "total": total}
        )
        return total

    async def handle_presence(self, change: PresenceChange) -> None:
        """
        Feed one voice-state update through the tracker.

        Never raises: tracking must not break the gateway event handler.
        The session is already closed by the time the upsert runs, so a
        failed write is lost rather than credited twice later.
        """
        effects = self.tracker.on_voice_presence_changed(change)

        for effect in effects:
            try:
                await self._apply(effect)
            except Exception:
                logger.exception(
                    f"Failed to record {effect.increment} grass points for user {effect.user_id}"
                )

    async def manual_touch(
        self,
        user_id: int,
        display_name: str,
        now: Optional[datetime] = None
    ) -> str:
        """Award the fixed touch-button point and return the confirmation"""
        effect = self.tracker.on_manual_touch(
            user_id, display_name, now or datetime.now(timezone.utc)
        )
        total = await self._apply(effect)
        return f"🌱 You touched grass! +{MANUAL_TOUCH_POINTS} point. Your total: **{total:,}**"

    async def get_account(self, user_id: int) -> Optional[GrassAccount]:
        row = await self.repo.get(user_id)
        return GrassAccount.from_row(row) if row else None

    async def get_leaderboard(self, limit: int = 10) -> list[GrassAccount]:
        """Top accounts by score, highest first; limit is clamped to 1..50"""
        limit = max(MIN_LIMIT, min(int(limit), MAX_LIMIT))
        rows = await self.repo.top(limit)
        return [GrassAccount.from_row(row) for row in rows]

    async def get_summary(self, connected_now: int) -> GrassSummary:
        """
        Totals across all accounts.

        connected_now (non-bot members currently in voice) is counted by
        the caller, which has the guild state.
        """
        total, accounts = await self.repo.summary()
        return GrassSummary(total_score=total, account_count=accounts, connected_now=connected_now)

    async def refresh_display(
        self,
        channel: Any,
        connected_now: int,
        view: Optional[discord.ui.View] = None
    ) -> int:
        """
        Edit the summary message, or post a new one.

        A failed edit (e.g. the message was deleted) falls back to sending
        a fresh message, whose ID is remembered for the next refresh.

        Returns:
            ID of the message now showing the summary
        """
        summary = await self.get_summary(connected_now)
        content = format_summary(summary)
        effect = self.tracker.plan_display(content)

        if isinstance(effect, EditDisplay):
            try:
                message = channel.get_partial_message(effect.message_id)
                await message.edit(content=effect.content, view=view)
                return effect.message_id
            except discord.HTTPException as e:
                logger.info(f"Could not edit grass display {effect.message_id}, reposting: {e}")
                self.tracker.remember_display(None)

        message = await channel.send(content=content, view=view)
        self.tracker.remember_display(message.id)
        logger.info(f"Posted grass display message {message.id}")
        return message.id
