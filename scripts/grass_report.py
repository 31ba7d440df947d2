#!/usr/bin/env python3
"""
NationCraft - Touch Grass Report

Usage:
    python scripts/grass_report.py --limit 20
    python scripts/grass_report.py --db ./data/nationcraft.db

Reads the bot database directly, so it can run while the bot is up.
"""

import os
import sys
import asyncio
import argparse
from pathlib import Path

# Add the repository root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

load_dotenv()

from nationcraft.db import Database, GrassRepository
from nationcraft.exceptions import InvalidLimitError
from nationcraft.grass.service import MEDALS
from nationcraft.logging_config import setup_logging, get_logger
from nationcraft.validation import validate_limit


console = Console()
logger = get_logger(__name__)


async def print_report(db_path: Path, limit: int) -> None:
    """Print the leaderboard and the server-wide totals"""
    if not db_path.exists():
        console.print(f"[red]Database not found: {db_path}[/red]")
        sys.exit(1)

    async with Database(db_path) as db:
        repo = GrassRepository(db)
        rows = await repo.top(limit)
        total, accounts = await repo.summary()

        table = Table(title=f"🌱 Grass Leaderboard (top {limit})")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Member", style="cyan")
        table.add_column("User ID", style="dim")
        table.add_column("Score", justify="right", style="green")
        table.add_column("Last update", style="magenta")

        for position, row in enumerate(rows, start=1):
            badge = MEDALS[position - 1] if position <= len(MEDALS) else str(position)
            table.add_row(
                badge,
                row["display_name"],
                str(row["user_id"]),
                f"{row['total_score']:,}",
                (row["last_update"] or "")[:19],
            )

        if rows:
            console.print(table)
        else:
            console.print("[yellow]Nobody has touched grass yet.[/yellow]")

        console.print(
            f"\n[bold]Total:[/bold] {total:,} points across {accounts} member(s)"
        )


def main():
    parser = argparse.ArgumentParser(
        description="NationCraft - Print the touch grass leaderboard",
    )

    parser.add_argument(
        "--limit", "-l",
        type=int,
        default=10,
        help="Number of members to show (default: 10, max: 50)"
    )

    parser.add_argument(
        "--db",
        default=os.getenv("DATABASE_PATH", "./data/nationcraft.db"),
        help="Path to the bot database (default: $DATABASE_PATH or ./data/nationcraft.db)"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args()

    setup_logging(level="DEBUG" if args.debug else "WARNING")

    try:
        limit = validate_limit(args.limit)
    except InvalidLimitError as e:
        console.print(f"[red]{e.message}[/red]")
        sys.exit(2)

    asyncio.run(print_report(Path(args.db), limit))


if __name__ == "__main__":
    main()
