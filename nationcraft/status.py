"""
Server Status Poller

Compares each status lookup against the previous one and announces:
- the server going online/offline
- the online player count changing

The first successful poll only seeds the baseline. A failed lookup counts
as "no change": the baseline is kept and nothing is announced.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import aiosqlite
import httpx

from .api.mcstatus import ServerStatus, StatusAPI
from .db.repositories import JoinedPlayerRepository
from .exceptions import StatusAPIError
from .logging_config import get_logger

logger = get_logger(__name__)

ONLINE_MESSAGE = "🟢 **Server is now ONLINE!**"
OFFLINE_MESSAGE = "🔴 **Server is now OFFLINE.**"


@dataclass(frozen=True)
class StatusBaseline:
    """The two values compared between polls"""
    online: bool
    player_count: int


def diff_status(
    baseline: Optional[StatusBaseline],
    status: ServerStatus
) -> tuple[StatusBaseline, list[str]]:
    """
    Compare a fresh status against the baseline.

    Returns:
        (new baseline, notifications), one notification per changed field
    """
    current = StatusBaseline(online=status.online, player_count=status.player_count)

    if baseline is None:
        return current, []

    notifications = []
    if current.online != baseline.online:
        notifications.append(ONLINE_MESSAGE if current.online else OFFLINE_MESSAGE)

    if current.player_count != baseline.player_count:
        notifications.append(
            f"👥 **Player Count Changed:** {baseline.player_count} → {current.player_count}"
        )

    return current, notifications


Notifier = Callable[[str], Awaitable[None]]


class StatusPoller:
    """
    Owns the baseline between polls.

    Usage:
        poller = StatusPoller(StatusAPI(config.minecraft), notify=channel.send)
        await poller.poll_once()   # call on a fixed interval
    """

    def __init__(
        self,
        api: StatusAPI,
        notify: Notifier,
        players: Optional[JoinedPlayerRepository] = None
    ):
        self.api = api
        self.notify = notify
        self.players = players
        self.baseline: Optional[StatusBaseline] = None

    async def poll_once(self) -> list[str]:
        """
        Run one poll cycle.

        Returns:
            The notifications emitted this cycle
        """
        try:
            status = await self.api.get_status()
        except (StatusAPIError, httpx.HTTPError, ValueError) as e:
            logger.warning(f"Status check failed, keeping previous baseline: {e}")
            return []

        if self.players and status.player_names:
            try:
                await self.players.record_many(status.player_names)
            except aiosqlite.Error as e:
                logger.error(f"Could not record joined players: {e}")

        self.baseline, notifications = diff_status(self.baseline, status)

        for message in notifications:
            try:
                await self.notify(message)
            except Exception as e:
                logger.warning(f"Failed to send status notification: {e}")

        if notifications:
            logger.info(
                "Server status changed",
                extra={"online": self.baseline.online, "players": self.baseline.player_count}
            )

        return notifications
