"""
Auto-replies to common "how do I join" questions in chat.
"""

from typing import Optional

from ..config import MinecraftServerConfig

JOIN_TRIGGERS = ("how do i join", "how to join", "join server")
CONSOLE_TRIGGERS = ("switch", "console", "xbox", "ps4", "ps5", "phone", "mobile")
JAVA_TRIGGERS = ("java",)


def join_info(server: MinecraftServerConfig) -> str:
    return (
        f"⬇️ **{server.name} Community Server info!** ⬇️\n"
        f"**Server Name:** {server.name}\n"
        f"**IP:** {server.host}\n"
        f"**Port:** {server.port}"
    )


def console_guide(server: MinecraftServerConfig) -> str:
    return (
        "📱 **How to Join on Console (Xbox, PlayStation, Switch, Mobile):**\n"
        "Download the **\"BedrockTogether\"** app on your phone.\n"
        "Enter this server:\n"
        f"**IP:** {server.host}\n"
        f"**Port:** {server.port}\n"
        "Click \"Run\".\n"
        "Then open Minecraft → Friends tab (or Worlds tab in new UI) → Join via LAN."
    )


def java_notice(server: MinecraftServerConfig) -> str:
    return (
        "💻 **Java Edition Notice**:\n"
        f"{server.name} is a **Bedrock-only** server.\n"
        "Java Edition players can't join, sorry!"
    )


def match_faq(content: str, server: Optional[MinecraftServerConfig] = None) -> Optional[str]:
    """
    Pick the canned reply for a chat message, if any.

    Checked in order: join info, console guide, Java notice.
    """
    if not content:
        return None

    server = server or MinecraftServerConfig()
    text = content.lower()

    if any(trigger in text for trigger in JOIN_TRIGGERS):
        return join_info(server)
    if any(trigger in text for trigger in CONSOLE_TRIGGERS):
        return console_guide(server)
    if any(trigger in text for trigger in JAVA_TRIGGERS):
        return java_notice(server)
    return None
