"""SQLite connection helpers and schema for the default user repository."""
from __future__ import annotations
import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT NOT NULL UNIQUE COLLATE NOCASE,
    nick TEXT NOT NULL,
    password TEXT NOT NULL,
    admin INTEGER NOT NULL DEFAULT 0
);
CREATE TABLE IF NOT EXISTS user_meta (
    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    value TEXT,
    PRIMARY KEY (user_id, name)
);
"""


def get_connection(path: str) -> sqlite3.Connection:
    """Open a connection with name-addressable rows and foreign keys enforced.

    Args:
        path: Database file path, or ":memory:"

    Returns:
        sqlite3 connection
    """
    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    """Create tables if they do not exist (idempotent)."""
    conn.executescript(SCHEMA)
    conn.commit()
    logger.debug("User schema ready")
