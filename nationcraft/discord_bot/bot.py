"""
Discord Bot Core

Main bot class that handles:
- Slash commands (coordinates, teams, server info, AI, moderation, grass)
- Chat auto-replies and the !ask prefix
- Spam detection on guild messages
- Voice activity tracking and the scheduled grass display
- Server status polling
"""

from datetime import datetime, timezone
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands, tasks

from ..logging_config import get_logger, LogContext
from ..config import AppConfig, get_config
from ..db import Database
from ..db.repositories import (
    CoordinateRepository,
    GrassRepository,
    JoinedPlayerRepository,
    TeamRepository,
    WarningRepository,
)
from ..exceptions import ClaudeAPIError, NationCraftError, NotInTeamError, ValidationError
from ..api.mcstatus import SERVER_INFO_FIELDS, StatusAPI
from ..status import StatusPoller
from ..ai.relay import AIRelay
from ..grass import GrassService, GrassTracker, PresenceChange, format_leaderboard
from ..moderation import SpamDetector, format_warnings
from ..validation import (
    VISIBILITY_PUBLIC,
    VISIBILITY_PRIVATE,
    VISIBILITY_TEAM,
    sanitize_for_discord,
    validate_coordinate_name,
    validate_coordinates,
    validate_description,
    validate_team_name,
    validate_visibility,
)
from .faq import match_faq
from .formatting import (
    chunk_lines,
    count_voice_members,
    format_cords,
    format_joined_players,
    format_team,
    format_teams,
)
from .views import GrassView

logger = get_logger(__name__)

ASK_PREFIX = "!ask"

VISIBILITY_CHOICES = [
    app_commands.Choice(name="Public", value=VISIBILITY_PUBLIC),
    app_commands.Choice(name="Private", value=VISIBILITY_PRIVATE),
    app_commands.Choice(name="Team", value=VISIBILITY_TEAM),
]

SERVER_INFO_CHOICES = [app_commands.Choice(name=f, value=f) for f in SERVER_INFO_FIELDS]


async def _send(interaction: discord.Interaction, content: str, ephemeral: bool = False):
    """Reply, or follow up if the interaction was already answered/deferred"""
    if interaction.response.is_done():
        await interaction.followup.send(content, ephemeral=ephemeral)
    else:
        await interaction.response.send_message(content, ephemeral=ephemeral)


async def _send_chunks(interaction: discord.Interaction, chunks: list[str], ephemeral: bool = False):
    for chunk in chunks:
        await _send(interaction, chunk, ephemeral=ephemeral)


class NationBot(commands.Bot):
    """
    Community bot for a Minecraft Bedrock server.

    Every long-lived piece of state (database repositories, the grass
    tracker, the status baseline, the spam history) is owned by this
    instance and created in setup_hook().
    """

    def __init__(self, config: Optional[AppConfig] = None):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.voice_states = True
        intents.guilds = True
        intents.members = True

        super().__init__(
            command_prefix="!",  # Fallback, we primarily use slash commands
            intents=intents,
        )

        self.config = config or get_config()

        self.db: Optional[Database] = None
        self.cords: Optional[CoordinateRepository] = None
        self.teams: Optional[TeamRepository] = None
        self.joined_players: Optional[JoinedPlayerRepository] = None
        self.warnings: Optional[WarningRepository] = None
        self.grass: Optional[GrassService] = None
        self.grass_view: Optional[GrassView] = None
        self.status_api: Optional[StatusAPI] = None
        self.status_poller: Optional[StatusPoller] = None
        self.ai_relay: Optional[AIRelay] = None
        self.spam_detector = SpamDetector.from_config(self.config.moderation)

        self.status_loop = tasks.loop(
            seconds=self.config.minecraft.poll_interval_seconds
        )(self._status_tick)
        self.status_loop.before_loop(self._wait_until_ready)

        self.grass_loop = tasks.loop(
            seconds=self.config.grass.display_interval_seconds
        )(self._grass_tick)
        self.grass_loop.before_loop(self._wait_until_ready)

    async def setup_hook(self):
        """Called when bot is starting up"""
        self.db = Database(self.config.database.path, echo=self.config.database.echo)
        await self.db.connect()
        db = self.db

        self.cords = CoordinateRepository(db)
        self.teams = TeamRepository(db)
        self.joined_players = JoinedPlayerRepository(db)
        self.warnings = WarningRepository(db)

        self.grass = GrassService(
            GrassRepository(db),
            GrassTracker(self.config.grass.min_session_seconds),
        )
        self.grass_view = GrassView(self.grass, self.config.grass.leaderboard_size)
        # Buttons on summary messages posted before a restart keep working
        self.add_view(self.grass_view)

        self.status_api = StatusAPI(self.config.minecraft)
        self.status_poller = StatusPoller(
            self.status_api,
            notify=self._send_log,
            players=self.joined_players,
        )

        if self.config.claude.enabled:
            self.ai_relay = AIRelay(self.config.claude)
        else:
            logger.warning("ANTHROPIC_API_KEY not set, AI relay disabled")

        self._register_commands()
        self.tree.on_error = self._on_app_command_error

        guild_id = self.config.discord.guild_id
        if guild_id:
            guild = discord.Object(id=guild_id)
            self.tree.copy_global_to(guild=guild)
            await self.tree.sync(guild=guild)
            logger.info(f"Synced commands to guild {guild_id}")
        else:
            await self.tree.sync()
            logger.info("Synced commands globally")

        self.status_loop.start()
        if self.config.discord.grass_channel_id:
            self.grass_loop.start()
        else:
            logger.warning("GRASS_CHANNEL_ID not set, grass display disabled")

    def _register_commands(self):
        """Register all slash commands"""

        # ---------- coordinates ----------

        @self.tree.command(name="savecords", description="Save coordinates")
        @app_commands.describe(
            name="Name for this location",
            x="X coordinate",
            y="Y coordinate",
            z="Z coordinate",
            visibility="Who can see it",
            description="Optional description",
        )
        @app_commands.choices(visibility=VISIBILITY_CHOICES)
        async def savecords_command(
            interaction: discord.Interaction,
            name: str,
            x: int,
            y: int,
            z: int,
            visibility: str,
            description: Optional[str] = None,
        ):
            await self._handle_savecords(interaction, name, x, y, z, visibility, description)

        @self.tree.command(name="privatecords", description="Show your private coordinates")
        async def privatecords_command(interaction: discord.Interaction):
            await self._handle_privatecords(interaction)

        @self.tree.command(name="publiccords", description="Show all public coordinates")
        async def publiccords_command(interaction: discord.Interaction):
            await self._handle_publiccords(interaction)

        @self.tree.command(name="teamcords", description="Show coordinates shared with your team")
        async def teamcords_command(interaction: discord.Interaction):
            await self._handle_teamcords(interaction)

        @self.tree.command(name="deletecords", description="Delete one of your saved coordinates")
        @app_commands.describe(name="Name of the location to delete")
        async def deletecords_command(interaction: discord.Interaction, name: str):
            await self._handle_deletecords(interaction, name)

        # ---------- server ----------

        @self.tree.command(name="playersjoined", description="Show all players who ever joined the server")
        async def playersjoined_command(interaction: discord.Interaction):
            await self._handle_playersjoined(interaction)

        @self.tree.command(name="serverinfo", description="Get Minecraft server info")
        @app_commands.describe(filter="Select specific server info")
        @app_commands.choices(filter=SERVER_INFO_CHOICES)
        async def serverinfo_command(interaction: discord.Interaction, filter: Optional[str] = None):
            await self._handle_serverinfo(interaction, filter)

        # ---------- teams ----------

        @self.tree.command(name="createteam", description="Create a team")
        @app_commands.describe(name="Team name")
        async def createteam_command(interaction: discord.Interaction, name: str):
            await self._handle_createteam(interaction, name)

        @self.tree.command(name="jointeam", description="Ask to join a team")
        @app_commands.describe(name="Team name")
        async def jointeam_command(interaction: discord.Interaction, name: str):
            await self._handle_jointeam(interaction, name)

        @self.tree.command(name="acceptjoin", description="Accept a join request for your team")
        @app_commands.describe(member="Member who asked to join")
        async def acceptjoin_command(interaction: discord.Interaction, member: discord.Member):
            await self._handle_acceptjoin(interaction, member)

        @self.tree.command(name="denyjoin", description="Deny a join request for your team")
        @app_commands.describe(member="Member who asked to join")
        async def denyjoin_command(interaction: discord.Interaction, member: discord.Member):
            await self._handle_denyjoin(interaction, member)

        @self.tree.command(name="leaveteam", description="Leave your team (owners disband it)")
        async def leaveteam_command(interaction: discord.Interaction):
            await self._handle_leaveteam(interaction)

        @self.tree.command(name="team", description="Show your team")
        async def team_command(interaction: discord.Interaction):
            await self._handle_team(interaction)

        @self.tree.command(name="teams", description="List all teams")
        async def teams_command(interaction: discord.Interaction):
            await self._handle_teams(interaction)

        # ---------- AI ----------

        @self.tree.command(name="ask", description="Ask the AI a question")
        @app_commands.describe(prompt="Your question")
        async def ask_command(interaction: discord.Interaction, prompt: str):
            await self._handle_ask(interaction, prompt)

        # ---------- moderation ----------

        @self.tree.command(name="warn", description="Warn a member")
        @app_commands.describe(member="Member to warn", reason="Why")
        @app_commands.default_permissions(moderate_members=True)
        @app_commands.checks.has_permissions(moderate_members=True)
        async def warn_command(interaction: discord.Interaction, member: discord.Member, reason: str):
            await self._handle_warn(interaction, member, reason)

        @self.tree.command(name="warnings", description="Show a member's warnings")
        @app_commands.describe(member="Member to look up")
        @app_commands.default_permissions(moderate_members=True)
        @app_commands.checks.has_permissions(moderate_members=True)
        async def warnings_command(interaction: discord.Interaction, member: discord.Member):
            await self._handle_warnings(interaction, member)

        @self.tree.command(name="clearwarnings", description="Clear a member's warnings")
        @app_commands.describe(member="Member whose warnings to clear")
        @app_commands.default_permissions(moderate_members=True)
        @app_commands.checks.has_permissions(moderate_members=True)
        async def clearwarnings_command(interaction: discord.Interaction, member: discord.Member):
            await self._handle_clearwarnings(interaction, member)

        # ---------- grass ----------

        @self.tree.command(name="grass", description="Show how much grass you've touched")
        async def grass_command(interaction: discord.Interaction):
            await self._handle_grass(interaction)

        @self.tree.command(name="grassleaderboard", description="Show the touch grass leaderboard")
        async def grassleaderboard_command(interaction: discord.Interaction):
            await self._handle_grassleaderboard(interaction)

    # ==================== Error handling ====================

    async def _fail(self, interaction: discord.Interaction, error: Exception, action: str):
        """Tell the user what went wrong; log anything unexpected"""
        if isinstance(error, NationCraftError):
            message = error.message if error.message.startswith("❌") else f"❌ {error.message}"
            await _send(interaction, message, ephemeral=True)
            return

        logger.exception(f"Error in {action}: {error}")
        await _send(interaction, "❌ Something went wrong. Please try again later.", ephemeral=True)

    async def _on_app_command_error(
        self,
        interaction: discord.Interaction,
        error: app_commands.AppCommandError
    ):
        if isinstance(error, app_commands.MissingPermissions):
            await _send(interaction, "❌ You don't have permission to use this command.", ephemeral=True)
            return

        original = getattr(error, "original", error)
        await self._fail(interaction, original, interaction.command.name if interaction.command else "command")

    # ==================== Coordinates ====================

    async def _handle_savecords(
        self,
        interaction: discord.Interaction,
        name: str,
        x: int,
        y: int,
        z: int,
        visibility: str,
        description: Optional[str]
    ):
        """Handle /savecords command"""
        with LogContext():
            try:
                name = validate_coordinate_name(name)
                x, y, z = validate_coordinates(x, y, z)
                visibility = validate_visibility(visibility)
                description = validate_description(description)

                team_id = None
                if visibility == VISIBILITY_TEAM:
                    team = await self.teams.get_for_user(interaction.user.id)
                    if not team:
                        raise NotInTeamError(interaction.user.id)
                    team_id = team["id"]

                await self.cords.save(
                    interaction.user.id, name, x, y, z, visibility,
                    description=description, team_id=team_id,
                )

                await _send(
                    interaction,
                    f"✅ Saved **{name}** at `{x} {y} {z}` ({visibility}).",
                    ephemeral=visibility != VISIBILITY_PUBLIC,
                )
            except Exception as e:
                await self._fail(interaction, e, "savecords")

    async def _handle_privatecords(self, interaction: discord.Interaction):
        """Handle /privatecords command"""
        with LogContext():
            try:
                rows = await self.cords.list_private(interaction.user.id)
                await _send_chunks(
                    interaction,
                    format_cords(rows, "🔒 **Your private coordinates:**",
                                 empty_message="You have no private coordinates saved."),
                    ephemeral=True,
                )
            except Exception as e:
                await self._fail(interaction, e, "privatecords")

    async def _handle_publiccords(self, interaction: discord.Interaction):
        """Handle /publiccords command"""
        with LogContext():
            try:
                rows = await self.cords.list_public()
                await _send_chunks(
                    interaction,
                    format_cords(rows, "🌍 **Public coordinates:**", show_owner=True,
                                 empty_message="No public coordinates saved yet."),
                )
            except Exception as e:
                await self._fail(interaction, e, "publiccords")

    async def _handle_teamcords(self, interaction: discord.Interaction):
        """Handle /teamcords command"""
        with LogContext():
            try:
                team = await self.teams.get_for_user(interaction.user.id)
                if not team:
                    raise NotInTeamError(interaction.user.id)

                rows = await self.cords.list_for_team(team["id"])
                await _send_chunks(
                    interaction,
                    format_cords(rows, f"🛡️ **{team['name']} coordinates:**", show_owner=True,
                                 empty_message="Your team has no shared coordinates yet."),
                    ephemeral=True,
                )
            except Exception as e:
                await self._fail(interaction, e, "teamcords")

    async def _handle_deletecords(self, interaction: discord.Interaction, name: str):
        """Handle /deletecords command"""
        with LogContext():
            try:
                name = validate_coordinate_name(name)
                removed = await self.cords.delete(interaction.user.id, name)
                if removed:
                    await _send(interaction, f"🗑️ Deleted **{name}**.", ephemeral=True)
                else:
                    await _send(interaction, f"❌ You have no coordinates called **{name}**.", ephemeral=True)
            except Exception as e:
                await self._fail(interaction, e, "deletecords")

    # ==================== Server ====================

    async def _handle_playersjoined(self, interaction: discord.Interaction):
        """Handle /playersjoined command"""
        with LogContext():
            try:
                rows = await self.joined_players.list_all()
                await _send_chunks(interaction, format_joined_players(rows))
            except Exception as e:
                await self._fail(interaction, e, "playersjoined")

    async def _handle_serverinfo(self, interaction: discord.Interaction, filter: Optional[str]):
        """Handle /serverinfo command"""
        await interaction.response.defer(thinking=True)

        with LogContext():
            try:
                status = await self.status_api.get_status()
            except Exception as e:
                logger.warning(f"Server info lookup failed: {e}")
                await interaction.followup.send("❌ Failed to fetch server info.")
                return

            if filter:
                content = f"**{filter}:** {status.format_field(filter)}"
            else:
                content = f"🖥️ **{self.config.minecraft.name}**\n{status.format_summary()}"

            for chunk in chunk_lines(content.split("\n")):
                await interaction.followup.send(chunk)

    # ==================== Teams ====================

    async def _handle_createteam(self, interaction: discord.Interaction, name: str):
        """Handle /createteam command"""
        with LogContext():
            try:
                name = validate_team_name(name)
                team = await self.teams.create(name, interaction.user.id)
                await _send(interaction, f"🛡️ Team **{team['name']}** created! Others can ask to join with `/jointeam`.")
            except Exception as e:
                await self._fail(interaction, e, "createteam")

    async def _handle_jointeam(self, interaction: discord.Interaction, name: str):
        """Handle /jointeam command"""
        with LogContext():
            try:
                name = validate_team_name(name)
                team = await self.teams.request_join(name, interaction.user.id)
                await _send(
                    interaction,
                    f"📨 Asked to join **{team['name']}**. <@{team['owner_id']}> can accept with `/acceptjoin`.",
                )
            except Exception as e:
                await self._fail(interaction, e, "jointeam")

    async def _handle_acceptjoin(self, interaction: discord.Interaction, member: discord.Member):
        """Handle /acceptjoin command"""
        with LogContext():
            try:
                team = await self.teams.accept(interaction.user.id, member.id)
                await _send(interaction, f"✅ {member.mention} joined **{team['name']}**!")
            except Exception as e:
                await self._fail(interaction, e, "acceptjoin")

    async def _handle_denyjoin(self, interaction: discord.Interaction, member: discord.Member):
        """Handle /denyjoin command"""
        with LogContext():
            try:
                team = await self.teams.deny(interaction.user.id, member.id)
                await _send(
                    interaction,
                    f"🚫 Denied {member.mention}'s request to join **{team['name']}**.",
                    ephemeral=True,
                )
            except Exception as e:
                await self._fail(interaction, e, "denyjoin")

    async def _handle_leaveteam(self, interaction: discord.Interaction):
        """Handle /leaveteam command"""
        with LogContext():
            try:
                team, disbanded = await self.teams.leave(interaction.user.id)
                if disbanded:
                    await _send(interaction, f"💥 You disbanded **{team['name']}**.")
                else:
                    await _send(interaction, f"👋 You left **{team['name']}**.")
            except Exception as e:
                await self._fail(interaction, e, "leaveteam")

    async def _handle_team(self, interaction: discord.Interaction):
        """Handle /team command"""
        with LogContext():
            try:
                team = await self.teams.get_for_user(interaction.user.id)
                if not team:
                    raise NotInTeamError(interaction.user.id)

                members = await self.teams.list_members(team["id"])
                requests = None
                if team["owner_id"] == interaction.user.id:
                    requests = await self.teams.list_requests(interaction.user.id)

                await _send(interaction, format_team(team, members, requests), ephemeral=True)
            except Exception as e:
                await self._fail(interaction, e, "team")

    async def _handle_teams(self, interaction: discord.Interaction):
        """Handle /teams command"""
        with LogContext():
            try:
                rows = await self.teams.list_all()
                await _send_chunks(interaction, format_teams(rows))
            except Exception as e:
                await self._fail(interaction, e, "teams")

    # ==================== AI ====================

    async def _ask_ai(self, prompt: str) -> str:
        """Answer text for a prompt; every failure becomes a chat-friendly message"""
        if self.ai_relay is None:
            return "❌ The AI is not configured on this bot."

        try:
            return await self.ai_relay.ask(prompt)
        except ValidationError as e:
            return e.message
        except ClaudeAPIError as e:
            logger.error(
                f"AI relay error: {e.message}",
                extra={"error_type": type(e).__name__, "details": e.details},
            )
            return "❌ Failed to get a response from the AI."

    async def _handle_ask(self, interaction: discord.Interaction, prompt: str):
        """Handle /ask command"""
        await interaction.response.defer(thinking=True)
        with LogContext():
            reply = await self._ask_ai(prompt)
            await interaction.followup.send(reply)

    # ==================== Moderation ====================

    async def _handle_warn(self, interaction: discord.Interaction, member: discord.Member, reason: str):
        """Handle /warn command"""
        with LogContext():
            try:
                reason = sanitize_for_discord(reason.strip(), max_length=500) or "No reason given"
                await self.warnings.add(
                    interaction.guild_id, member.id, reason, moderator_id=interaction.user.id
                )
                count = len(await self.warnings.list_for_user(interaction.guild_id, member.id))
                await _send(interaction, f"⚠️ {member.mention} has been warned: {reason} (warning #{count})")
            except Exception as e:
                await self._fail(interaction, e, "warn")

    async def _handle_warnings(self, interaction: discord.Interaction, member: discord.Member):
        """Handle /warnings command"""
        with LogContext():
            try:
                rows = await self.warnings.list_for_user(interaction.guild_id, member.id)
                await _send_chunks(
                    interaction,
                    chunk_lines(format_warnings(member.display_name, rows).split("\n")),
                    ephemeral=True,
                )
            except Exception as e:
                await self._fail(interaction, e, "warnings")

    async def _handle_clearwarnings(self, interaction: discord.Interaction, member: discord.Member):
        """Handle /clearwarnings command"""
        with LogContext():
            try:
                removed = await self.warnings.clear_for_user(interaction.guild_id, member.id)
                await _send(
                    interaction,
                    f"🧹 Cleared {removed} warning(s) for {member.mention}.",
                    ephemeral=True,
                )
            except Exception as e:
                await self._fail(interaction, e, "clearwarnings")

    async def _handle_spam(self, message: discord.Message, reason: str):
        """Delete a spam message, record an automatic warning and tell the channel"""
        try:
            await message.delete()
        except (discord.Forbidden, discord.NotFound) as e:
            logger.debug(f"Spam message {message.id} not deleted: {e}")
        except discord.HTTPException as e:
            logger.warning(f"Could not delete spam message {message.id}: {e}")

        try:
            await self.warnings.add(message.guild.id, message.author.id, f"Spam: {reason}")
        except Exception:
            logger.exception(f"Could not record spam warning for {message.author.id}")

        try:
            await message.channel.send(
                f"🚫 {message.author.mention}, slow down! You were warned for {reason}.",
                delete_after=15,
            )
        except discord.HTTPException as e:
            logger.warning(f"Could not post spam notice: {e}")

    # ==================== Grass ====================

    async def _handle_grass(self, interaction: discord.Interaction):
        """Handle /grass command"""
        with LogContext():
            try:
                account = await self.grass.get_account(interaction.user.id)
                if account is None:
                    await _send(
                        interaction,
                        "🌱 You haven't touched any grass yet. Hang out in voice or press the button!",
                        ephemeral=True,
                    )
                    return

                status = "🎧 currently in voice" if self.grass.tracker.is_active(interaction.user.id) else ""
                await _send(
                    interaction,
                    f"🌱 You've touched **{account.total_score:,}** grass. {status}".strip(),
                    ephemeral=True,
                )
            except Exception as e:
                await self._fail(interaction, e, "grass")

    async def _handle_grassleaderboard(self, interaction: discord.Interaction):
        """Handle /grassleaderboard command"""
        with LogContext():
            try:
                accounts = await self.grass.get_leaderboard(self.config.grass.leaderboard_size)
                await _send(interaction, format_leaderboard(accounts))
            except Exception as e:
                await self._fail(interaction, e, "grassleaderboard")

    # ==================== Events ====================

    async def on_ready(self):
        """Called when bot is ready"""
        logger.info(f"Bot is ready! Logged in as {self.user}")
        logger.info(f"Connected to {len(self.guilds)} guild(s)")

        await self.change_presence(
            activity=discord.Activity(
                type=discord.ActivityType.watching,
                name=f"{self.config.minecraft.name} | /serverinfo"
            )
        )

    async def on_message(self, message: discord.Message):
        """Spam checks, !ask and FAQ auto-replies"""
        if message.author.bot:
            return

        with LogContext():
            if message.guild is not None:
                reason = self.spam_detector.check(message.author.id, message.content)
                if reason:
                    await self._handle_spam(message, reason)
                    return

            content = message.content.strip()

            command, _, rest = content.partition(" ")
            if command.lower() == ASK_PREFIX:
                prompt = rest.strip()
                async with message.channel.typing():
                    reply = await self._ask_ai(prompt)
                await message.reply(reply)
                return

            faq_reply = match_faq(content, self.config.minecraft)
            if faq_reply:
                await message.reply(faq_reply)
                return

        await self.process_commands(message)

    async def on_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState
    ):
        """Feed voice joins/leaves into the grass tracker"""
        if self.grass is None:
            return

        change = PresenceChange(
            user_id=member.id,
            display_name=member.display_name,
            was_in_channel=before.channel is not None,
            is_in_channel=after.channel is not None,
            self_muted=after.self_mute,
            self_deafened=after.self_deaf,
            now=datetime.now(timezone.utc),
            is_bot=member.bot,
        )
        await self.grass.handle_presence(change)

    # ==================== Scheduled tasks ====================

    async def _wait_until_ready(self):
        await self.wait_until_ready()

    async def _send_log(self, content: str):
        """Post to the log channel (status notifications)"""
        channel_id = self.config.discord.log_channel_id
        if not channel_id:
            logger.info(f"Status notification (no log channel): {content}")
            return

        channel = self.get_channel(channel_id)
        if channel is None:
            channel = await self.fetch_channel(channel_id)
        await channel.send(content)

    async def _status_tick(self):
        with LogContext():
            try:
                await self.status_poller.poll_once()
            except Exception as e:
                logger.exception(f"Status poll failed: {e}")

    async def _grass_tick(self):
        with LogContext():
            channel_id = self.config.discord.grass_channel_id
            try:
                channel = self.get_channel(channel_id) or await self.fetch_channel(channel_id)
                await self.grass.refresh_display(
                    channel, count_voice_members(self.guilds), view=self.grass_view
                )
            except Exception as e:
                logger.exception(f"Grass display refresh failed: {e}")

    async def close(self):
        """Clean up when bot is shutting down"""
        self.status_loop.cancel()
        self.grass_loop.cancel()
        if self.status_api:
            await self.status_api.close()
        if self.db:
            await self.db.close()
        await super().close()


def run_bot():
    """Entry point to run the bot"""
    from dotenv import load_dotenv
    from ..logging_config import setup_logging

    load_dotenv()
    config = get_config()
    setup_logging(
        level=config.logging.level,
        json_format=config.logging.json_format,
        log_file=config.logging.log_file,
    )

    bot = NationBot(config)
    bot.run(config.discord.token, log_handler=None)


if __name__ == "__main__":
    run_bot()
