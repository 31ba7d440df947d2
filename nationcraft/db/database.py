"""
SQLite storage for the bot.

One `Database` per process, owned by whoever opens it (the bot in
setup_hook, the report script in main). The schema ships as package data
and is applied on every connect; every statement in it is idempotent.
"""

from importlib import resources
from pathlib import Path
from typing import Any, Iterable, Optional, Union

import aiosqlite

from ..logging_config import get_logger

logger = get_logger(__name__)

Params = Union[tuple, list]


def load_schema() -> str:
    """schema.sql from the installed package"""
    return resources.files(__package__).joinpath("schema.sql").read_text(encoding="utf-8")


class Database:
    """
    Thin async wrapper over one aiosqlite connection.

    Every write commits immediately. Rows come back as plain dicts.

    Usage:
        async with Database(Path("./data/nationcraft.db")) as db:
            rows = await db.fetch_all("SELECT * FROM grass")
    """

    def __init__(self, path: Union[str, Path], echo: bool = False):
        self.path = Path(path)
        self.echo = echo
        self._conn: Optional[aiosqlite.Connection] = None

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def connect(self) -> None:
        if self._conn is not None:
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(self.path)
        conn.row_factory = aiosqlite.Row

        await conn.execute("PRAGMA foreign_keys = ON")
        # the report script reads while the bot writes
        await conn.execute("PRAGMA journal_mode = WAL")
        await conn.executescript(load_schema())
        await conn.commit()

        self._conn = conn
        logger.info(f"Opened database {self.path}")

    async def close(self) -> None:
        if self._conn is None:
            return
        await self._conn.close()
        self._conn = None
        logger.info(f"Closed database {self.path}")

    @property
    def conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError(f"Database {self.path} is not open")
        return self._conn

    async def _run(self, query: str, params: Params) -> aiosqlite.Cursor:
        if self.echo:
            logger.debug(f"SQL: {' '.join(query.split())}", extra={"params": list(params)})
        return await self.conn.execute(query, params)

    async def execute(self, query: str, params: Params = ()) -> int:
        """Run a write and return the affected row count"""
        cursor = await self._run(query, params)
        await self.conn.commit()
        return cursor.rowcount

    async def insert(self, query: str, params: Params = ()) -> int:
        """Run an INSERT and return the new rowid"""
        cursor = await self._run(query, params)
        await self.conn.commit()
        return cursor.lastrowid

    async def execute_many(self, query: str, rows: Iterable[Params]) -> None:
        await self.conn.executemany(query, rows)
        await self.conn.commit()

    async def fetch_one(self, query: str, params: Params = ()) -> Optional[dict[str, Any]]:
        cursor = await self._run(query, params)
        row = await cursor.fetchone()
        return dict(row) if row is not None else None

    async def fetch_all(self, query: str, params: Params = ()) -> list[dict[str, Any]]:
        cursor = await self._run(query, params)
        return [dict(row) for row in await cursor.fetchall()]
