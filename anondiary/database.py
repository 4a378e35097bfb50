"""SQLite storage accessor for diary entries and memories.

Every read and write is scoped by ``device_id`` except lookups and deletes
by entry id. Connections are short-lived: each operation opens one through
``_connect()``, which commits on success, rolls back on failure and always
closes, so every read sees the latest committed write.
"""

import contextlib
import sqlite3
from pathlib import Path
from typing import Annotated, List, Optional

from fastapi import Depends, Request

from .errors import StorageError
from .logging_config import get_logger
from .types import DEFAULT_NAME, Entry, Memory, utc_now

logger = get_logger("database")

ENTRIES_TABLE = "entries"
MEMORIES_TABLE = "memories"

SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {ENTRIES_TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    content TEXT NOT NULL,
    greentext TEXT,
    name TEXT NOT NULL DEFAULT '{DEFAULT_NAME}',
    sub TEXT NOT NULL DEFAULT '',
    device_id TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_entries_device_created
    ON {ENTRIES_TABLE} (device_id, created_at);

CREATE TABLE IF NOT EXISTS {MEMORIES_TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    memory_text TEXT NOT NULL,
    entry_id INTEGER,
    device_id TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_memories_device_created
    ON {MEMORIES_TABLE} (device_id, created_at);
"""


class DiaryStorage:
    """Thin accessor over the ``entries`` and ``memories`` tables.

    Args:
        db_path: Path to the SQLite database file.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self._opened = False

    # === Lifecycle ===

    def open(self) -> "DiaryStorage":
        """Create the schema if needed. Safe to call more than once."""
        if self._opened:
            return self
        if self.db_path.parent and not self.db_path.parent.exists():
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with self._connect() as conn:
                conn.executescript(SCHEMA)
        except sqlite3.Error as e:
            logger.error(f"Failed to initialise database at {self.db_path}: {e}")
            raise StorageError(f"Cannot open database: {e}") from e
        self._opened = True
        logger.info(f"Connected to diary database at {self.db_path}")
        return self

    def close(self) -> None:
        """Mark the accessor closed.

        Connections are per-operation, so there is nothing held open here;
        this marks the end of the accessor's lifecycle.
        """
        if self._opened:
            logger.info("Database connection closed.")
        self._opened = False

    def __enter__(self) -> "DiaryStorage":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    @contextlib.contextmanager
    def _connect(self):
        """Context manager that handles the transaction and closes the connection."""
        conn = self._get_conn()
        try:
            yield conn
            conn.commit()
        except Exception as e:
            logger.debug(f"Transaction failed, rolling back: {e}")
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextlib.contextmanager
    def _operation(self, name: str):
        """Run a storage operation, converting sqlite errors to StorageError."""
        try:
            with self._connect() as conn:
                yield conn
        except sqlite3.Error as e:
            logger.error(f"Storage operation '{name}' failed: {e}", exc_info=True)
            raise StorageError(f"{name} failed: {e}") from e

    def ping(self) -> bool:
        """Return True when the database answers a trivial query."""
        try:
            with self._connect() as conn:
                conn.execute("SELECT 1").fetchone()
            return True
        except sqlite3.Error as e:
            logger.debug(f"Database ping failed: {e}")
            return False

    # === Entries ===

    def list_entries(self, device_id: str) -> List[Entry]:
        """All entries for a device, newest first."""
        with self._operation("list_entries") as conn:
            rows = conn.execute(
                f"SELECT * FROM {ENTRIES_TABLE} WHERE device_id = ? "
                "ORDER BY created_at DESC, id DESC",
                (device_id,),
            ).fetchall()
        return [_row_to_entry(row) for row in rows]

    def get_entry(self, entry_id: int) -> Optional[Entry]:
        """Look up a single entry by id. Not device-scoped."""
        with self._operation("get_entry") as conn:
            row = conn.execute(
                f"SELECT * FROM {ENTRIES_TABLE} WHERE id = ?", (entry_id,)
            ).fetchone()
        return _row_to_entry(row) if row else None

    def insert_entry(
        self,
        *,
        content: str,
        greentext: str,
        device_id: str,
        name: str = DEFAULT_NAME,
        sub: str = "",
    ) -> Entry:
        """Insert an entry and return it with its assigned id and timestamp."""
        created_at = utc_now()
        with self._operation("insert_entry") as conn:
            cursor = conn.execute(
                f"INSERT INTO {ENTRIES_TABLE} "
                "(content, greentext, name, sub, device_id, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (content, greentext, name, sub, device_id, created_at),
            )
            entry_id = cursor.lastrowid
        return Entry(
            id=entry_id,
            content=content,
            greentext=greentext,
            name=name,
            sub=sub,
            device_id=device_id,
            created_at=created_at,
        )

    def delete_entry(self, entry_id: int) -> int:
        """Delete an entry by id. Returns the number of rows removed."""
        with self._operation("delete_entry") as conn:
            cursor = conn.execute(f"DELETE FROM {ENTRIES_TABLE} WHERE id = ?", (entry_id,))
            return cursor.rowcount

    def count_entries(self, device_id: str) -> int:
        with self._operation("count_entries") as conn:
            row = conn.execute(
                f"SELECT COUNT(*) FROM {ENTRIES_TABLE} WHERE device_id = ?", (device_id,)
            ).fetchone()
        return row[0]

    # === Memories ===

    def list_memories(self, device_id: str, limit: Optional[int] = None) -> List[Memory]:
        """Memories for a device, newest first, optionally limited."""
        sql = (
            f"SELECT * FROM {MEMORIES_TABLE} WHERE device_id = ? "
            "ORDER BY created_at DESC, id DESC"
        )
        params: tuple = (device_id,)
        if limit is not None:
            sql += " LIMIT ?"
            params = (device_id, limit)
        with self._operation("list_memories") as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_row_to_memory(row) for row in rows]

    def list_memories_with_source(self, device_id: str) -> List[Memory]:
        """Memories for a device joined with the content of their entry."""
        with self._operation("list_memories_with_source") as conn:
            rows = conn.execute(
                f"""
                SELECT m.*, e.content AS source_content
                FROM {MEMORIES_TABLE} m
                LEFT JOIN {ENTRIES_TABLE} e
                    ON m.entry_id = e.id AND e.device_id = m.device_id
                WHERE m.device_id = ?
                ORDER BY m.created_at DESC, m.id DESC
                """,
                (device_id,),
            ).fetchall()
        return [_row_to_memory(row) for row in rows]

    def insert_memory(
        self, *, memory_text: str, device_id: str, entry_id: Optional[int] = None
    ) -> int:
        """Append a memory. Returns its assigned id."""
        with self._operation("insert_memory") as conn:
            cursor = conn.execute(
                f"INSERT INTO {MEMORIES_TABLE} (memory_text, entry_id, device_id, created_at) "
                "VALUES (?, ?, ?, ?)",
                (memory_text, entry_id, device_id, utc_now()),
            )
            return cursor.lastrowid

    def count_memories(self, device_id: str) -> int:
        with self._operation("count_memories") as conn:
            row = conn.execute(
                f"SELECT COUNT(*) FROM {MEMORIES_TABLE} WHERE device_id = ?", (device_id,)
            ).fetchone()
        return row[0]

    # === Bulk ===

    def clear_device(self, device_id: str) -> tuple[int, int]:
        """Delete every entry and memory for a device in one transaction.

        AUTOINCREMENT counters are reset only when both tables end up empty.
        A memory row may still point at a deleted entry id, so entry ids must
        not be handed out again while any memory survives.

        Returns:
            (entries_deleted, memories_deleted)
        """
        with self._operation("clear_device") as conn:
            memories_deleted = conn.execute(
                f"DELETE FROM {MEMORIES_TABLE} WHERE device_id = ?", (device_id,)
            ).rowcount
            entries_deleted = conn.execute(
                f"DELETE FROM {ENTRIES_TABLE} WHERE device_id = ?", (device_id,)
            ).rowcount
            remaining = sum(
                conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
                for table in (ENTRIES_TABLE, MEMORIES_TABLE)
            )
            if remaining == 0:
                conn.execute(
                    "DELETE FROM sqlite_sequence WHERE name IN (?, ?)",
                    (ENTRIES_TABLE, MEMORIES_TABLE),
                )
                logger.debug("ID counters reset to 1")
        return entries_deleted, memories_deleted


def _row_to_entry(row: sqlite3.Row) -> Entry:
    return Entry(
        id=row["id"],
        content=row["content"],
        greentext=row["greentext"] or "",
        name=row["name"],
        sub=row["sub"],
        device_id=row["device_id"],
        created_at=row["created_at"],
    )


def _row_to_memory(row: sqlite3.Row) -> Memory:
    keys = row.keys()
    return Memory(
        id=row["id"],
        memory_text=row["memory_text"],
        entry_id=row["entry_id"],
        device_id=row["device_id"],
        created_at=row["created_at"],
        source_content=row["source_content"] if "source_content" in keys else None,
    )


# =============================================================================
# FastAPI dependency
# =============================================================================


def get_db(request: Request) -> DiaryStorage:
    """FastAPI dependency for the storage accessor opened in the app lifespan."""
    return request.app.state.storage


# Type alias for dependency injection
Database = Annotated[DiaryStorage, Depends(get_db)]
