"""SQLite persistence for the local link store."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Optional

from .config import DB_PATH, ensure_data_dirs
from .errors import PersistFailed
from .models import Link, Store

logger = logging.getLogger(__name__)


def get_connection() -> sqlite3.Connection:
    """Get a database connection."""
    ensure_data_dirs()
    conn = sqlite3.connect(str(DB_PATH))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    return conn


def init_db() -> None:
    """Initialize the database schema."""
    conn = get_connection()
    try:
        conn.executescript(SCHEMA_SQL)
        conn.commit()
    finally:
        conn.close()


SCHEMA_SQL = """
-- Links table. Rows are tombstoned via deleted_at, never removed by normal flow.
CREATE TABLE IF NOT EXISTS links (
    id TEXT PRIMARY KEY,
    url TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    created_at TEXT,
    last_accessed_at TEXT,
    num_accessed INTEGER NOT NULL DEFAULT 0,
    deleted_at TEXT,
    position INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_links_position ON links(position);
CREATE INDEX IF NOT EXISTS idx_links_deleted ON links(deleted_at);
"""


# --- Serialization ---

def _to_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_link_row(row: sqlite3.Row) -> Link:
    """Convert a database row to a Link model."""
    return Link(
        id=row["id"],
        url=row["url"],
        description=row["description"],
        created_at=row["created_at"],
        last_accessed_at=row["last_accessed_at"],
        num_accessed=row["num_accessed"],
        deleted_at=row["deleted_at"],
    )


# --- CRUD Helpers ---

def write_links(conn: sqlite3.Connection, store: Store) -> None:
    """Replace the links table with ``store`` in one transaction."""
    rows = [
        (
            link.id,
            link.url,
            link.description,
            _to_iso(link.created_at),
            _to_iso(link.last_accessed_at),
            link.num_accessed,
            _to_iso(link.deleted_at),
            position,
        )
        for position, link in enumerate(store.values())
    ]
    with conn:
        conn.execute("DELETE FROM links")
        conn.executemany(
            """INSERT INTO links (id, url, description, created_at, last_accessed_at,
            num_accessed, deleted_at, position)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            rows,
        )


def read_links(conn: sqlite3.Connection) -> Store:
    """Read every link, including tombstones, in store order."""
    rows = conn.execute("SELECT * FROM links ORDER BY position, rowid").fetchall()
    store: Store = {}
    for row in rows:
        link = _parse_link_row(row)
        store[link.id] = link
    return store


# --- Persistence collaborator ---

def load_local() -> Store:
    """Load the local store of record. Raises PersistFailed on database errors."""
    try:
        init_db()
        conn = get_connection()
        try:
            return read_links(conn)
        finally:
            conn.close()
    except (sqlite3.Error, OSError) as e:
        raise PersistFailed(f"Could not load links from {DB_PATH}: {e}") from e


def save_local(store: Store) -> None:
    """Persist the full local store. Raises PersistFailed on database errors."""
    try:
        init_db()
        conn = get_connection()
        try:
            write_links(conn, store)
        finally:
            conn.close()
    except (sqlite3.Error, OSError) as e:
        logger.error("Saving %d links failed: %s", len(store), e)
        raise PersistFailed(f"Could not save links to {DB_PATH}: {e}") from e
    logger.debug("Saved %d links to %s", len(store), DB_PATH)
