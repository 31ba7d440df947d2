"""
Centralized Configuration Management

Loads configuration from environment variables with sensible defaults.
Supports development, staging, and production environments.
"""

import os
from dataclasses import dataclass
from typing import Optional
from enum import Enum
from functools import lru_cache

from .exceptions import ConfigurationError, MissingConfigError


class Environment(Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


@dataclass(frozen=True)
class DiscordConfig:
    """Discord gateway configuration"""
    token: str
    guild_id: Optional[int] = None
    log_channel_id: Optional[int] = None
    grass_channel_id: Optional[int] = None


@dataclass(frozen=True)
class ClaudeConfig:
    """Claude API configuration (AI relay)"""
    api_key: Optional[str] = None
    model: str = "claude-sonnet-4-20250514"
    max_tokens_chat: int = 1000
    timeout_seconds: float = 60.0
    max_retries: int = 3

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class MinecraftServerConfig:
    """The Bedrock server the status poller watches"""
    name: str = "SlxshyNationCraft"
    host: str = "87.106.101.66"
    port: int = 6367
    status_api_base: str = "https://api.mcstatus.io/v2/status/bedrock"
    poll_interval_seconds: float = 10.0
    timeout_seconds: float = 10.0
    max_retries: int = 3

    @property
    def status_url(self) -> str:
        return f"{self.status_api_base}/{self.host}:{self.port}"


@dataclass(frozen=True)
class GrassConfig:
    """Voice activity ("touch grass") tracking configuration"""
    display_interval_seconds: float = 60.0
    min_session_seconds: int = 30
    leaderboard_size: int = 10


@dataclass(frozen=True)
class ModerationConfig:
    """Spam detection thresholds"""
    spam_message_limit: int = 5
    spam_window_seconds: float = 5.0
    spam_duplicate_limit: int = 3


@dataclass(frozen=True)
class DatabaseConfig:
    """Database configuration"""
    path: str = "./data/nationcraft.db"
    echo: bool = False


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    json_format: bool = False
    log_file: Optional[str] = None


@dataclass(frozen=True)
class AppConfig:
    """Root application configuration"""
    env: Environment
    discord: DiscordConfig
    claude: ClaudeConfig
    minecraft: MinecraftServerConfig
    grass: GrassConfig
    moderation: ModerationConfig
    database: DatabaseConfig
    logging: LoggingConfig
    debug: bool = False


def _get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    """Get environment variable with optional requirement check"""
    value = os.getenv(key, default)
    if required and not value:
        raise ConfigurationError(f"Required environment variable {key} is not set")
    return value


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable"""
    value = os.getenv(key, "").lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no"):
        return False
    return default


def _get_env_int(key: str, default: int) -> int:
    """Get integer environment variable"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_env_float(key: str, default: float) -> float:
    """Get float environment variable"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_env_id(key: str) -> Optional[int]:
    """Get a Discord snowflake from the environment, None if unset"""
    value = os.getenv(key)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{key} must be a numeric Discord ID, got '{value}'")


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """
    Load and cache application configuration.

    Uses @lru_cache to ensure config is loaded once and reused.
    Call get_config.cache_clear() to reload configuration.
    """
    env_str = _get_env("APP_ENV", "development")
    try:
        env = Environment(env_str.lower())
    except ValueError:
        env = Environment.DEVELOPMENT

    is_prod = env == Environment.PRODUCTION

    # Discord token is required, everything else has a default
    token = _get_env("DISCORD_BOT_TOKEN")
    if not token:
        raise MissingConfigError(
            "DISCORD_BOT_TOKEN",
            "Get one at https://discord.com/developers/applications"
        )

    return AppConfig(
        env=env,
        debug=_get_env_bool("DEBUG", default=not is_prod),
        discord=DiscordConfig(
            token=token,
            guild_id=_get_env_id("DISCORD_GUILD_ID"),
            log_channel_id=_get_env_id("LOG_CHANNEL_ID"),
            grass_channel_id=_get_env_id("GRASS_CHANNEL_ID"),
        ),
        claude=ClaudeConfig(
            api_key=_get_env("ANTHROPIC_API_KEY"),
            model=_get_env("CLAUDE_MODEL", "claude-sonnet-4-20250514"),
            max_tokens_chat=_get_env_int("CLAUDE_MAX_TOKENS_CHAT", 1000),
            timeout_seconds=_get_env_float("CLAUDE_TIMEOUT", 60.0),
            max_retries=_get_env_int("CLAUDE_MAX_RETRIES", 3),
        ),
        minecraft=MinecraftServerConfig(
            name=_get_env("MC_SERVER_NAME", "SlxshyNationCraft"),
            host=_get_env("MC_SERVER_HOST", "87.106.101.66"),
            port=_get_env_int("MC_SERVER_PORT", 6367),
            poll_interval_seconds=_get_env_float("STATUS_POLL_INTERVAL", 10.0),
            timeout_seconds=_get_env_float("STATUS_TIMEOUT", 10.0),
            max_retries=_get_env_int("STATUS_MAX_RETRIES", 3),
        ),
        grass=GrassConfig(
            display_interval_seconds=_get_env_float("GRASS_DISPLAY_INTERVAL", 60.0),
            leaderboard_size=_get_env_int("GRASS_LEADERBOARD_SIZE", 10),
        ),
        moderation=ModerationConfig(
            spam_message_limit=_get_env_int("SPAM_MESSAGE_LIMIT", 5),
            spam_window_seconds=_get_env_float("SPAM_WINDOW_SECONDS", 5.0),
            spam_duplicate_limit=_get_env_int("SPAM_DUPLICATE_LIMIT", 3),
        ),
        database=DatabaseConfig(
            path=_get_env("DATABASE_PATH", "./data/nationcraft.db"),
            echo=_get_env_bool("DATABASE_ECHO", False),
        ),
        logging=LoggingConfig(
            level=_get_env("LOG_LEVEL", "DEBUG" if not is_prod else "INFO"),
            json_format=is_prod,
            log_file=_get_env("LOG_FILE"),
        ),
    )


def validate_config() -> bool:
    """
    Validate configuration on startup.

    Returns True if valid, raises ConfigurationError if not.
    """
    try:
        config = get_config()

        if config.claude.api_key and not config.claude.api_key.startswith("sk-ant-"):
            raise ConfigurationError(
                "ANTHROPIC_API_KEY should start with 'sk-ant-'. "
                "Get a valid key at https://console.anthropic.com"
            )

        if not 0 < config.minecraft.port < 65536:
            raise ConfigurationError(
                f"MC_SERVER_PORT must be between 1 and 65535, got {config.minecraft.port}"
            )

        if config.grass.leaderboard_size < 1:
            raise ConfigurationError("GRASS_LEADERBOARD_SIZE must be at least 1")

        return True

    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Configuration validation failed: {e}")
