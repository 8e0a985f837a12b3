# database.py
# Database initialization and connection management
import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .config import DB_PATH
from .models import ENTITY_TYPES

logger = logging.getLogger(__name__)

COLLECTIONS = tuple(ENTITY_TYPES)

# One table per entity collection, one row per entity.
# position keeps collection order (appends grow it, alert prepends shrink it).
CREATE_COLLECTION_TABLE = """
CREATE TABLE IF NOT EXISTS {table} (
    id TEXT PRIMARY KEY,
    position INTEGER NOT NULL,
    data TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""

CREATE_POSITION_INDEX = """
CREATE INDEX IF NOT EXISTS idx_{table}_position ON {table} (position);
"""

CREATE_STORE_META_TABLE = """
CREATE TABLE IF NOT EXISTS store_meta (
    key TEXT PRIMARY KEY,
    value TEXT,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


def _check_table(table: str) -> str:
    if table not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {table}")
    return table


class DatabaseConnection:
    """Database connection manager"""

    @classmethod
    def get_connection(cls, db_path: Optional[Union[str, Path]] = None) -> sqlite3.Connection:
        """Open a connection to the store database (defaults to HOSPITAL_DB_PATH)"""
        conn = sqlite3.connect(
            str(db_path if db_path is not None else DB_PATH),
            timeout=30.0,  # Wait up to 30 seconds for locks
        )
        conn.row_factory = sqlite3.Row
        # Enable WAL mode so a reader (tools/debug_db.py) does not block writes
        conn.execute("PRAGMA journal_mode=WAL")
        return conn


def init_database(conn: sqlite3.Connection) -> None:
    """Create the schema (IF NOT EXISTS handles re-runs) and apply migrations"""
    cursor = conn.cursor()
    for table in COLLECTIONS:
        cursor.execute(CREATE_COLLECTION_TABLE.format(table=table))
        cursor.execute(CREATE_POSITION_INDEX.format(table=table))
    cursor.execute(CREATE_STORE_META_TABLE)
    conn.commit()

    _migrate_database(cursor)
    conn.commit()


def _migrate_database(cursor: sqlite3.Cursor) -> None:
    """Apply database migrations for existing databases"""
    # Migration: early databases had no updated_at column on the collection tables
    for table in COLLECTIONS:
        cursor.execute(f"PRAGMA table_info({table})")
        columns = [col[1] for col in cursor.fetchall()]
        if "updated_at" not in columns:
            cursor.execute(f"ALTER TABLE {table} ADD COLUMN updated_at TIMESTAMP")
            logger.info("Migration applied: Added updated_at column to %s table", table)


# ========================================
# Store Meta Operations
# ========================================

def get_meta(conn: sqlite3.Connection, key: str) -> Optional[str]:
    row = conn.execute("SELECT value FROM store_meta WHERE key = ?", (key,)).fetchone()
    return row[0] if row else None


def set_meta(conn: sqlite3.Connection, key: str, value: str) -> None:
    conn.execute("""
        INSERT INTO store_meta (key, value) VALUES (?, ?)
        ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP
    """, (key, value))


# ========================================
# Record Operations
# ========================================

def load_collection(conn: sqlite3.Connection, table: str) -> List[Dict[str, Any]]:
    """Load every record of a collection in collection order"""
    rows = conn.execute(f"SELECT data FROM {_check_table(table)} ORDER BY position").fetchall()
    return [json.loads(row[0]) for row in rows]


def load_all(conn: sqlite3.Connection) -> Dict[str, List[Dict[str, Any]]]:
    return {table: load_collection(conn, table) for table in COLLECTIONS}


def insert_record(conn: sqlite3.Connection, table: str, record: Dict[str, Any], prepend: bool = False) -> None:
    """Insert a record at the end of its collection (or at the front with prepend)"""
    table = _check_table(table)
    position_sql = (
        f"(SELECT COALESCE(MIN(position), 1) - 1 FROM {table})" if prepend
        else f"(SELECT COALESCE(MAX(position), -1) + 1 FROM {table})"
    )
    conn.execute(f"""
        INSERT INTO {table} (id, position, data)
        VALUES (?, {position_sql}, ?)
    """, (record["id"], json.dumps(record)))


def update_record(conn: sqlite3.Connection, table: str, record: Dict[str, Any]) -> bool:
    """Overwrite a stored record in place, keeping its position"""
    cursor = conn.execute(f"""
        UPDATE {_check_table(table)}
        SET data = ?, updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
    """, (json.dumps(record), record["id"]))
    return cursor.rowcount > 0


def delete_records(conn: sqlite3.Connection, table: str, record_ids: Iterable[str]) -> int:
    cursor = conn.executemany(
        f"DELETE FROM {_check_table(table)} WHERE id = ?",
        [(record_id,) for record_id in record_ids],
    )
    return cursor.rowcount


def replace_all(conn: sqlite3.Connection, collections: Dict[str, List[Dict[str, Any]]]) -> None:
    """Rewrite every collection table from plain record dicts"""
    cursor = conn.cursor()
    for table in COLLECTIONS:
        cursor.execute(f"DELETE FROM {table}")
        cursor.executemany(
            f"INSERT INTO {table} (id, position, data) VALUES (?, ?, ?)",
            [(record["id"], position, json.dumps(record))
             for position, record in enumerate(collections.get(table) or [])],
        )
