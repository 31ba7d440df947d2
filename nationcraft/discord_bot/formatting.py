"""
Reply formatting for slash commands.

Discord caps a message at 2000 characters, so list replies are built as
lines and split into chunks.
"""

from typing import Any, Iterable, Optional

MESSAGE_CHUNK_LIMIT = 1900


def chunk_lines(lines: Iterable[str], limit: int = MESSAGE_CHUNK_LIMIT) -> list[str]:
    """Join lines into as few messages as possible, each under limit"""
    chunks: list[str] = []
    current = ""

    for line in lines:
        if len(line) > limit:
            line = line[:limit - 3] + "..."
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate

    if current:
        chunks.append(current)
    return chunks


def format_cord(row: dict[str, Any], show_owner: bool = False) -> str:
    line = f"📍 **{row['name']}**: `{row['x']} {row['y']} {row['z']}`"
    if row.get("description"):
        line += f" ({row['description']})"
    if show_owner:
        line += f" by <@{row['user_id']}>"
    return line


def format_cords(
    rows: list[dict[str, Any]],
    title: str,
    show_owner: bool = False,
    empty_message: str = "No coordinates saved yet."
) -> list[str]:
    """Coordinate listing as one or more message chunks"""
    if not rows:
        return [empty_message]
    return chunk_lines([title] + [format_cord(row, show_owner) for row in rows])


def format_joined_players(rows: list[dict[str, Any]]) -> list[str]:
    if not rows:
        return ["No players have joined the server yet."]

    lines = [f"👥 **Players who have joined ({len(rows)}):**"]
    lines.extend(f"• {row['name']}" for row in rows)
    return chunk_lines(lines)


def format_team(
    team: dict[str, Any],
    members: list[int],
    requests: Optional[list[dict[str, Any]]] = None
) -> str:
    lines = [
        f"🛡️ **{team['name']}**",
        f"Owner: <@{team['owner_id']}>",
        f"Members ({len(members)}): " + ", ".join(f"<@{user_id}>" for user_id in members),
    ]
    if requests:
        lines.append(
            "Pending requests: " + ", ".join(f"<@{r['user_id']}>" for r in requests)
        )
    return "\n".join(lines)


def format_teams(rows: list[dict[str, Any]]) -> list[str]:
    if not rows:
        return ["No teams yet. Create one with `/createteam`!"]

    lines = ["🛡️ **Teams:**"]
    lines.extend(
        f"• **{row['name']}** ({row['member_count']} member"
        f"{'s' if row['member_count'] != 1 else ''}), owner <@{row['owner_id']}>"
        for row in rows
    )
    return chunk_lines(lines)


def count_voice_members(guilds: Iterable[Any]) -> int:
    """Non-bot members currently connected to any voice or stage channel"""
    seen: set[int] = set()
    for guild in guilds:
        for channel in list(guild.voice_channels) + list(guild.stage_channels):
            for member in channel.members:
                if not member.bot:
                    seen.add(member.id)
    return len(seen)
