"""
Unit tests for configuration module.
"""

import pytest
from nationcraft.config import (
    get_config,
    validate_config,
    Environment,
    ConfigurationError,
    MinecraftServerConfig,
)


class TestGetConfig:
    """Tests for configuration loading"""

    def test_loads_with_valid_env(self, mock_env_vars):
        """Test config loads successfully with valid environment"""
        config = get_config()

        assert config.discord.token == "test-discord-token-12345"
        assert config.claude.api_key == "sk-ant-REDACTED"
        assert config.claude.enabled is True
        assert config.env == Environment.DEVELOPMENT

    def test_missing_token_raises_error(self, mock_env_vars_missing_token):
        """Test missing Discord token raises error"""
        with pytest.raises(ConfigurationError) as exc_info:
            get_config()

        assert "DISCORD_BOT_TOKEN" in str(exc_info.value)

    def test_missing_anthropic_key_disables_relay(self, mock_env_vars_missing_anthropic):
        """Test the AI relay is optional"""
        config = get_config()

        assert config.claude.api_key is None
        assert config.claude.enabled is False

    def test_defaults_to_development(self, mock_env_vars, monkeypatch):
        """Test defaults to development environment"""
        monkeypatch.delenv("APP_ENV", raising=False)

        config = get_config()
        assert config.env == Environment.DEVELOPMENT

    def test_unknown_environment_falls_back(self, mock_env_vars, monkeypatch):
        """Test unknown APP_ENV values fall back to development"""
        monkeypatch.setenv("APP_ENV", "moon-base")

        config = get_config()
        assert config.env == Environment.DEVELOPMENT

    def test_production_environment(self, mock_env_vars, monkeypatch):
        """Test production environment settings"""
        monkeypatch.setenv("APP_ENV", "production")
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        config = get_config()

        assert config.env == Environment.PRODUCTION
        assert config.debug is False
        assert config.logging.json_format is True
        assert config.logging.level == "INFO"

    def test_config_is_cached(self, mock_env_vars):
        """Test configuration is cached"""
        config1 = get_config()
        config2 = get_config()

        assert config1 is config2

    def test_cache_can_be_cleared(self, mock_env_vars, monkeypatch):
        """Test cache can be cleared to reload config"""
        config1 = get_config()
        get_config.cache_clear()

        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        config2 = get_config()

        assert config1 is not config2
        assert config2.logging.level == "ERROR"

    def test_channel_ids_parsed(self, mock_env_vars, monkeypatch):
        """Test Discord IDs are read as integers"""
        monkeypatch.setenv("DISCORD_GUILD_ID", "123456789012345678")
        monkeypatch.setenv("GRASS_CHANNEL_ID", "222")

        config = get_config()

        assert config.discord.guild_id == 123456789012345678
        assert config.discord.grass_channel_id == 222
        assert config.discord.log_channel_id is None

    def test_non_numeric_channel_id_raises(self, mock_env_vars, monkeypatch):
        """Test a malformed Discord ID is a configuration error"""
        monkeypatch.setenv("LOG_CHANNEL_ID", "general")

        with pytest.raises(ConfigurationError) as exc_info:
            get_config()

        assert "LOG_CHANNEL_ID" in str(exc_info.value)

    def test_grass_and_spam_defaults(self, mock_env_vars):
        """Test documented defaults for the grass display and spam filter"""
        config = get_config()

        assert config.grass.display_interval_seconds == 60.0
        assert config.grass.min_session_seconds == 30
        assert config.grass.leaderboard_size == 10
        assert config.moderation.spam_message_limit == 5
        assert config.moderation.spam_window_seconds == 5.0
        assert config.moderation.spam_duplicate_limit == 3

    def test_custom_intervals_from_env(self, mock_env_vars, monkeypatch):
        """Test poll and display intervals come from the environment"""
        monkeypatch.setenv("STATUS_POLL_INTERVAL", "30")
        monkeypatch.setenv("GRASS_DISPLAY_INTERVAL", "45.5")

        config = get_config()

        assert config.minecraft.poll_interval_seconds == 30.0
        assert config.grass.display_interval_seconds == 45.5

    def test_invalid_number_uses_default(self, mock_env_vars, monkeypatch):
        """Test unparseable numbers fall back to the default"""
        monkeypatch.setenv("SPAM_MESSAGE_LIMIT", "lots")

        config = get_config()
        assert config.moderation.spam_message_limit == 5

    def test_custom_model_from_env(self, mock_env_vars, monkeypatch):
        """Test custom Claude model from environment"""
        monkeypatch.setenv("CLAUDE_MODEL", "claude-3-5-haiku-latest")

        config = get_config()
        assert config.claude.model == "claude-3-5-haiku-latest"


class TestMinecraftServerConfig:
    """Tests for the status lookup address"""

    def test_default_status_url(self):
        config = MinecraftServerConfig()
        assert config.status_url == "https://api.mcstatus.io/v2/status/bedrock/87.106.101.66:6367"

    def test_status_url_uses_host_and_port(self):
        config = MinecraftServerConfig(host="play.example.net", port=19132)
        assert config.status_url.endswith("/play.example.net:19132")


class TestValidateConfig:
    """Tests for configuration validation"""

    def test_valid_config_passes(self, mock_env_vars):
        """Test valid configuration passes validation"""
        assert validate_config() is True

    def test_valid_without_anthropic_key(self, mock_env_vars_missing_anthropic):
        """Test the relay key is not required"""
        assert validate_config() is True

    def test_invalid_anthropic_key_format(self, mock_env_vars, monkeypatch):
        """Test invalid Anthropic API key format fails validation"""
        monkeypatch.setenv("ANTHROPIC_API_KEY", "invalid-key-format")

        with pytest.raises(ConfigurationError) as exc_info:
            validate_config()

        assert "sk-ant-" in str(exc_info.value)

    def test_port_out_of_range(self, mock_env_vars, monkeypatch):
        """Test server port must be a valid TCP port"""
        monkeypatch.setenv("MC_SERVER_PORT", "70000")

        with pytest.raises(ConfigurationError) as exc_info:
            validate_config()

        assert "MC_SERVER_PORT" in str(exc_info.value)

    def test_leaderboard_size_must_be_positive(self, mock_env_vars, monkeypatch):
        monkeypatch.setenv("GRASS_LEADERBOARD_SIZE", "0")

        with pytest.raises(ConfigurationError):
            validate_config()


class TestEnvironment:
    """Tests for Environment enum"""

    def test_values(self):
        assert Environment.DEVELOPMENT.value == "development"
        assert Environment.STAGING.value == "staging"
        assert Environment.PRODUCTION.value == "production"

    def test_from_string(self):
        """Test creating Environment from string"""
        assert Environment("development") == Environment.DEVELOPMENT
        assert Environment("production") == Environment.PRODUCTION
