#!/usr/bin/env python3
"""
Run the NationCraft Discord Bot

Usage:
    python scripts/run_discord_bot.py

Required environment variables:
    DISCORD_BOT_TOKEN - Your Discord bot token

Optional:
    ANTHROPIC_API_KEY - Claude API key, enables /ask and !ask
    DISCORD_GUILD_ID - Server ID for faster command sync
    LOG_CHANNEL_ID - Channel for server status notifications
    GRASS_CHANNEL_ID - Channel for the touch grass summary
"""

import sys
from pathlib import Path

# Add the repository root to path
root_path = Path(__file__).parent.parent
sys.path.insert(0, str(root_path))

from dotenv import load_dotenv


def check_dependencies():
    """Check that required dependencies are installed"""
    missing = []

    try:
        import discord
    except ImportError:
        missing.append("discord.py")

    try:
        import aiosqlite
    except ImportError:
        missing.append("aiosqlite")

    try:
        import httpx
    except ImportError:
        missing.append("httpx")

    if missing:
        print("❌ Missing dependencies:")
        for dep in missing:
            print(f"   - {dep}")
        print("\nInstall with:")
        print("   pip install -e .")
        sys.exit(1)


def check_environment():
    """Check that required environment variables are set"""
    import os

    required = {
        "DISCORD_BOT_TOKEN": "Discord bot token (https://discord.com/developers/applications)",
    }

    missing = []
    for var, description in required.items():
        if not os.getenv(var):
            missing.append(f"   {var} - {description}")

    if missing:
        print("❌ Missing environment variables:")
        for m in missing:
            print(m)
        print("\nCreate a .env file or set these variables.")
        sys.exit(1)

    if not os.getenv("ANTHROPIC_API_KEY"):
        print("⚠️  ANTHROPIC_API_KEY not set, /ask will be unavailable")


def main():
    """Run the Discord bot"""
    load_dotenv()

    print("⛏️  NationCraft - Discord Bot")
    print("=" * 40)

    print("Checking dependencies...")
    check_dependencies()
    print("✅ Dependencies OK")

    print("Checking environment...")
    check_environment()
    print("✅ Environment OK")

    from nationcraft.config import validate_config, ConfigurationError
    try:
        validate_config()
    except ConfigurationError as e:
        print(f"❌ {e.message}")
        sys.exit(1)

    print("\nStarting bot...")
    print("-" * 40)

    from nationcraft.discord_bot.bot import run_bot
    run_bot()


if __name__ == "__main__":
    main()
