"""
Minecraft Server Status Client

Looks up a Bedrock server through the mcstatus.io v2 API:
- Online flag and player counts
- Player names (when the server exposes them)
- The raw status document for /serverinfo
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception,
)

from ..config import MinecraftServerConfig
from ..exceptions import StatusAPIError
from ..logging_config import get_logger

logger = get_logger(__name__)

# Fields /serverinfo can filter on
SERVER_INFO_FIELDS = [
    "online", "host", "port", "version", "players", "gamemode",
    "edition", "software", "plugins", "motd", "retrieved_at", "expires_at", "eula_blocked",
]


def _should_retry(exception: BaseException) -> bool:
    """Retry transport failures and server-side errors, nothing else"""
    if isinstance(exception, httpx.TransportError):
        return True
    if isinstance(exception, StatusAPIError):
        return exception.status_code is not None and exception.status_code >= 500
    return False


@dataclass
class ServerStatus:
    """One status lookup, reduced to what the bot compares and shows"""
    online: bool
    player_count: int
    max_players: int = 0
    player_names: list[str] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_response(cls, data: Any) -> "ServerStatus":
        """
        Build from a decoded status document.

        Raises:
            StatusAPIError: The document does not have the expected shape
        """
        if not isinstance(data, dict):
            raise StatusAPIError.malformed(f"expected an object, got {type(data).__name__}")

        players = data.get("players") or {}
        if not isinstance(players, dict):
            raise StatusAPIError.malformed("players is not an object")

        entries = players.get("list") or []
        if not isinstance(entries, list):
            raise StatusAPIError.malformed("players.list is not a list")

        names = [
            p.get("name_clean") or p.get("name_raw")
            for p in entries
            if isinstance(p, dict)
        ]
        try:
            player_count = int(players.get("online") or 0)
            max_players = int(players.get("max") or 0)
        except (TypeError, ValueError):
            raise StatusAPIError.malformed("player counts are not numbers")

        return cls(
            online=bool(data.get("online")),
            player_count=player_count,
            max_players=max_players,
            player_names=[n for n in names if isinstance(n, str) and n],
            raw=data,
        )

    def format_field(self, name: str) -> str:
        """Render one top-level status field for a chat reply"""
        if name not in self.raw:
            return "N/A"

        value = self.raw[name]
        if value is None:
            return "N/A"
        if name == "version" and isinstance(value, dict):
            return value.get("name") or value.get("name_clean") or str(value.get("protocol", "N/A"))
        if name == "players" and isinstance(value, dict):
            return f"{value.get('online', 0)}/{value.get('max', 0)}"
        if name == "motd" and isinstance(value, dict):
            return value.get("clean") or value.get("raw") or "N/A"
        if name == "online":
            return "🟢 Online" if value else "🔴 Offline"
        if isinstance(value, list):
            return ", ".join(str(v.get("name", v)) if isinstance(v, dict) else str(v) for v in value) or "None"
        return str(value)

    def format_summary(self, fields: Optional[list[str]] = None) -> str:
        """All (or the given) fields as `**name:** value` lines"""
        lines = []
        for name in fields or SERVER_INFO_FIELDS:
            if name in self.raw:
                lines.append(f"**{name}:** {self.format_field(name)}")
        return "\n".join(lines) or "No status information available."


class StatusAPI:
    """
    mcstatus.io API client

    Usage:
        api = StatusAPI(config.minecraft)
        status = await api.get_status()
        await api.close()
    """

    def __init__(
        self,
        config: Optional[MinecraftServerConfig] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.config = config or MinecraftServerConfig()
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"Accept": "application/json"},
                timeout=self.config.timeout_seconds
            )
        return self._client

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception(_should_retry),
        reraise=True,
    )
    async def _request(self, url: str) -> dict:
        """GET a status document"""
        client = await self._get_client()
        response = await client.get(url)

        if response.status_code == 200:
            return response.json()
        elif response.status_code == 429:
            retry_after = int(response.headers.get("Retry-After", 0) or 0)
            raise StatusAPIError.rate_limited(retry_after or None)
        elif response.status_code == 404:
            raise StatusAPIError.not_found(url)
        elif response.status_code >= 500:
            raise StatusAPIError.server_error(response.status_code)
        else:
            raise StatusAPIError(
                f"Status API error (HTTP {response.status_code})",
                status_code=response.status_code,
                response_body=response.text[:500],
            )

    async def get_status(self) -> ServerStatus:
        """
        Fetch the configured server's status.

        Raises:
            StatusAPIError: Non-200 answer after retries
            httpx.TransportError: Network failure after retries
        """
        data = await self._request(self.config.status_url)
        status = ServerStatus.from_response(data)

        logger.debug(
            "Fetched server status",
            extra={"online": status.online, "players": status.player_count}
        )
        return status


# ==================== CLI for testing ====================

async def main():
    """Print the configured server's status"""
    from rich.console import Console
    from rich.table import Table

    console = Console()
    api = StatusAPI()

    console.print(f"\n[bold]Looking up {api.config.status_url}...[/bold]\n")

    try:
        status = await api.get_status()

        table = Table(title=api.config.name)
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="green")
        for name in SERVER_INFO_FIELDS:
            if name in status.raw:
                table.add_row(name, status.format_field(name))

        console.print(table)

    except (StatusAPIError, httpx.HTTPError) as e:
        console.print(f"[red]Status lookup failed: {e}[/red]")
    finally:
        await api.close()


if __name__ == "__main__":
    asyncio.run(main())
