from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterator, Sequence

from .errors import DuplicateName, InvalidTimestamp, QueryFailed, WriteFailed
from .timestamps import parse_legacy_datetime, to_unix_timestamp

logger = logging.getLogger(__name__)

Params = Sequence[Any]


@dataclass(frozen=True)
class WriteResult:
    lastrowid: int
    rowcount: int


class JournalDatabase:
    """Shared handle to the journal's SQLite file.

    One instance is created per process and passed to every store. Each call
    opens a short-lived connection while holding the handle's lock.
    """

    def __init__(self, db_file: Path):
        self._db_file = Path(db_file)
        self._db_file.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._migrate()

    @property
    def path(self) -> Path:
        return self._db_file

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_file, timeout=30)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    def query(self, sql: str, params: Params = ()) -> list[sqlite3.Row]:
        try:
            with self._lock, self._connection() as conn:
                return conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as exc:
            raise QueryFailed(f"Query failed: {exc}") from exc

    def write(
        self,
        sql: str,
        params: Params = (),
        duplicate_message: str | None = None,
    ) -> WriteResult:
        """Run one write statement and commit it.

        With ``duplicate_message`` set, a uniqueness violation is reported as
        ``DuplicateName`` instead of ``WriteFailed``.
        """
        try:
            with self._lock, self._connection() as conn:
                cursor = conn.execute(sql, tuple(params))
                conn.commit()
                return WriteResult(
                    lastrowid=int(cursor.lastrowid or 0),
                    rowcount=int(cursor.rowcount),
                )
        except sqlite3.IntegrityError as exc:
            if duplicate_message is not None and "UNIQUE" in str(exc).upper():
                raise DuplicateName(duplicate_message) from exc
            raise WriteFailed(f"Write failed: {exc}") from exc
        except sqlite3.Error as exc:
            raise WriteFailed(f"Write failed: {exc}") from exc

    def write_many(self, sql: str, rows: Sequence[Params]) -> None:
        try:
            with self._lock, self._connection() as conn:
                conn.executemany(sql, [tuple(row) for row in rows])
                conn.commit()
        except sqlite3.Error as exc:
            raise WriteFailed(f"Write failed: {exc}") from exc

    def schema_version(self) -> int:
        with self._lock, self._connection() as conn:
            return int(conn.execute("PRAGMA user_version").fetchone()[0])

    def _migrate(self) -> None:
        try:
            with self._lock, self._connection() as conn:
                current = int(conn.execute("PRAGMA user_version").fetchone()[0])
                for version, step in enumerate(MIGRATIONS, start=1):
                    if version <= current:
                        continue
                    logger.info("Upgrading %s to schema version %d", self._db_file, version)
                    step(conn)
                    conn.execute(f"PRAGMA user_version = {version}")
                    conn.commit()
        except sqlite3.Error as exc:
            raise WriteFailed(f"Database initialization failed for {self._db_file}: {exc}") from exc


def _create_tables(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS configs (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS ideas (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            content TEXT NOT NULL,
            attachments TEXT NOT NULL DEFAULT '[]',
            created_at INTEGER NOT NULL,
            date TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_ideas_date
        ON ideas(date);

        CREATE TABLE IF NOT EXISTS done_tasks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            content TEXT NOT NULL,
            start_time INTEGER NOT NULL,
            end_time INTEGER NOT NULL,
            attachments TEXT NOT NULL DEFAULT '[]',
            created_at INTEGER NOT NULL,
            date TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_tasks_date
        ON done_tasks(date);

        CREATE TABLE IF NOT EXISTS prompts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE,
            content TEXT NOT NULL,
            created_at INTEGER NOT NULL,
            updated_at INTEGER NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_prompts_name
        ON prompts(name);
        """
    )


_LEGACY_TIME_COLUMNS = {
    "ideas": ("created_at",),
    "done_tasks": ("start_time", "end_time", "created_at"),
}


def _convert_text_timestamps(conn: sqlite3.Connection) -> None:
    # Older files stored local "YYYY-MM-DD HH:MM:SS" text; the current schema uses unix seconds.
    for table, columns in _LEGACY_TIME_COLUMNS.items():
        for column in columns:
            rows = conn.execute(
                f"SELECT id, {column} AS value FROM {table} WHERE typeof({column}) = 'text'"
            ).fetchall()
            converted = 0
            for row in rows:
                seconds = _legacy_seconds(str(row["value"]))
                if seconds is None:
                    logger.warning("Leaving unparseable %s.%s for row %s", table, column, row["id"])
                    continue
                conn.execute(
                    f"UPDATE {table} SET {column} = ? WHERE id = ?",
                    (seconds, int(row["id"])),
                )
                converted += 1
            if converted:
                logger.debug("Converted %d %s.%s values to unix seconds", converted, table, column)


def _legacy_seconds(text: str) -> int | None:
    seconds = parse_legacy_datetime(text)
    if seconds is not None:
        return seconds
    try:
        return to_unix_timestamp(text)
    except InvalidTimestamp:
        return None


MIGRATIONS: list[Callable[[sqlite3.Connection], None]] = [
    _create_tables,
    _convert_text_timestamps,
]
