"""
Shared test fixtures for NationCraft bot tests.
"""

import pytest
import pytest_asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import Mock, AsyncMock

# Add the repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from nationcraft.config import get_config
from nationcraft.db import Database


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set up mock environment variables for testing"""
    monkeypatch.setenv("DISCORD_BOT_TOKEN", "test-discord-token-12345")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-REDACTED")
    monkeypatch.setenv("APP_ENV", "development")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    for var in ("DISCORD_GUILD_ID", "LOG_CHANNEL_ID", "GRASS_CHANNEL_ID", "MC_SERVER_PORT"):
        monkeypatch.delenv(var, raising=False)
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def mock_env_vars_missing_token(mock_env_vars, monkeypatch):
    """Environment without a Discord token"""
    monkeypatch.delenv("DISCORD_BOT_TOKEN", raising=False)


@pytest.fixture
def mock_env_vars_missing_anthropic(mock_env_vars, monkeypatch):
    """Environment without Anthropic API key"""
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)


@pytest_asyncio.fixture
async def db(tmp_path):
    """A connected database in a temporary directory"""
    async with Database(tmp_path / "test.db") as database:
        yield database


class FakeClock:
    """Monotonic clock the tests move by hand"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def t0():
    """A fixed, timezone-aware reference time"""
    return datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def at(t0):
    """at(seconds) -> t0 + seconds"""
    def _at(seconds: float) -> datetime:
        return t0 + timedelta(seconds=seconds)
    return _at


@pytest.fixture
def sample_status_response():
    """mcstatus.io v2 Bedrock response for an online server"""
    return {
        "online": True,
        "host": "87.106.101.66",
        "port": 6367,
        "retrieved_at": 1717243200000,
        "expires_at": 1717243260000,
        "eula_blocked": False,
        "version": {"name": "1.21.2", "protocol": 686},
        "players": {
            "online": 2,
            "max": 20,
            "list": [
                {"name_raw": "§aSteve", "name_clean": "Steve"},
                {"name_raw": "Alex", "name_clean": ""},
            ],
        },
        "motd": {"raw": "§bNationCraft", "clean": "NationCraft"},
        "gamemode": "Survival",
        "edition": "MCPE",
    }


@pytest.fixture
def mock_anthropic_client():
    """Mock AsyncAnthropic client for testing"""
    mock_client = Mock()
    mock_response = Mock()
    mock_response.content = [Mock(type="text", text="Dig at y=-58 for diamonds.")]
    mock_response.usage = Mock(input_tokens=20, output_tokens=12)
    mock_client.messages.create = AsyncMock(return_value=mock_response)
    return mock_client
