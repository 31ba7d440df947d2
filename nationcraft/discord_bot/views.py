"""
Persistent buttons attached to the grass summary message.

The view has no timeout and fixed custom IDs, so after a restart the bot
re-registers it with add_view() and old messages keep working.
"""

import discord

from ..grass import GrassService, format_leaderboard
from ..grass.tracker import TOUCH_BUTTON_ID, LEADERBOARD_BUTTON_ID
from ..logging_config import get_logger, LogContext

logger = get_logger(__name__)


class GrassView(discord.ui.View):
    def __init__(self, service: GrassService, leaderboard_size: int = 10):
        super().__init__(timeout=None)
        self.service = service
        self.leaderboard_size = leaderboard_size

    @discord.ui.button(
        label="Touch grass",
        emoji="🌱",
        style=discord.ButtonStyle.success,
        custom_id=TOUCH_BUTTON_ID,
    )
    async def touch_grass(self, interaction: discord.Interaction, button: discord.ui.Button):
        with LogContext():
            try:
                text = await self.service.manual_touch(
                    interaction.user.id, interaction.user.display_name
                )
            except Exception as e:
                logger.exception(f"Touch grass failed for user {interaction.user.id}: {e}")
                await interaction.response.send_message(
                    "❌ Couldn't record that. Try again in a moment.", ephemeral=True
                )
                return

            await interaction.response.send_message(text, ephemeral=True)

    @discord.ui.button(
        label="Leaderboard",
        emoji="🏆",
        style=discord.ButtonStyle.secondary,
        custom_id=LEADERBOARD_BUTTON_ID,
    )
    async def show_leaderboard(self, interaction: discord.Interaction, button: discord.ui.Button):
        with LogContext():
            try:
                accounts = await self.service.get_leaderboard(self.leaderboard_size)
            except Exception as e:
                logger.exception(f"Grass leaderboard failed: {e}")
                await interaction.response.send_message(
                    "❌ Couldn't load the leaderboard.", ephemeral=True
                )
                return

            await interaction.response.send_message(format_leaderboard(accounts), ephemeral=True)
